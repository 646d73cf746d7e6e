from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import (
    Activity,
    AuditEventType,
    ConsentOutcome,
    EmailStatus,
    InstructionOutcome,
    ParentalRelationship,
    ProgrammeOutcome,
    ProgrammeType,
    RecordVaccineCriteria,
    RegistrationOutcome,
    ReplyDecision,
    ReplyMethod,
    ReplyRefusal,
    ScreenOutcome,
    SessionType,
    SmsStatus,
    TriageOutcome,
    VaccinationOutcome,
    VaccineMethod,
)


HealthAnswerValue = Literal["Yes", "No"]

ENTITY_CONFIG = {"extra": "forbid", "frozen": True}


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are read as UTC so every record orders on one clock."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Vaccine(BaseModel):
    id: str
    brand: str
    method: VaccineMethod
    alternative: bool = False

    model_config = ENTITY_CONFIG


class Programme(BaseModel):
    id: str
    name: str
    type: ProgrammeType
    vaccine_ids: List[str] = Field(default_factory=list)
    sequence: List[str] = Field(default_factory=list)

    model_config = ENTITY_CONFIG


class Session(BaseModel):
    id: str
    type: SessionType = SessionType.SCHOOL
    dates: List[date] = Field(default_factory=list)
    closed: bool = False
    open_at: Optional[date] = None
    reminder_weeks: Optional[int] = Field(default=None, ge=0)
    registration: Optional[bool] = None
    psd_protocol: bool = False
    attendance: Dict[str, RegistrationOutcome] = Field(default_factory=dict)
    programme_ids: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_dates(self) -> "Session":
        for earlier, later in zip(self.dates, self.dates[1:]):
            if later <= earlier:
                raise ValueError("dates must be chronological with no duplicates")
        return self

    model_config = ENTITY_CONFIG


class Patient(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    programme_ids: List[str] = Field(default_factory=list)
    reply_ids: List[str] = Field(default_factory=list)
    vaccination_ids: List[str] = Field(default_factory=list)
    event_ids: List[str] = Field(default_factory=list)

    model_config = ENTITY_CONFIG


class Parent(BaseModel):
    full_name: str
    relationship: ParentalRelationship = ParentalRelationship.UNKNOWN
    email: Optional[str] = None
    email_status: Optional[EmailStatus] = None
    sms: bool = False
    sms_status: Optional[SmsStatus] = None

    model_config = ENTITY_CONFIG


class HealthAnswer(BaseModel):
    answer: HealthAnswerValue = "No"
    details: Optional[str] = None

    model_config = ENTITY_CONFIG


class Reply(BaseModel):
    id: str
    patient_id: str
    programme_id: str
    session_id: Optional[str] = None
    created_at: datetime
    method: ReplyMethod = ReplyMethod.WEBSITE
    parent: Optional[Parent] = None
    self_consent: bool = False
    decision: ReplyDecision = ReplyDecision.NO_RESPONSE
    alternative: bool = False
    invalid: bool = False
    confirmed: bool = False
    health_answers: Optional[Dict[str, HealthAnswer]] = None
    refusal_reason: Optional[ReplyRefusal] = None

    model_config = ENTITY_CONFIG

    @field_validator("created_at")
    @classmethod
    def normalise_created_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class AuditEvent(BaseModel):
    id: str
    created_at: datetime
    name: str
    type: Optional[AuditEventType] = None
    note: str = ""
    outcome: Optional[ScreenOutcome] = None
    programme_ids: List[str] = Field(default_factory=list)
    invalid: bool = False

    model_config = ENTITY_CONFIG

    @field_validator("created_at")
    @classmethod
    def normalise_created_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class Vaccination(BaseModel):
    id: str
    patient_session_id: Optional[str] = None
    programme_id: str
    created_at: datetime
    outcome: VaccinationOutcome
    vaccine_id: Optional[str] = None
    invalid: bool = False

    model_config = ENTITY_CONFIG

    @field_validator("created_at")
    @classmethod
    def normalise_created_at(cls, value: datetime) -> datetime:
        return as_utc(value)


class PatientSession(BaseModel):
    id: str
    patient_id: str
    programme_id: str
    session_id: str
    alternative: bool = False
    instruction_id: Optional[str] = None

    model_config = ENTITY_CONFIG


class TraceEntry(BaseModel):
    resolver: str
    rule_id: str

    model_config = {"extra": "forbid"}


class PatientSessionStatus(BaseModel):
    patient_session_id: str
    patient_id: str
    programme_id: str
    session_id: str
    consent: ConsentOutcome
    screen: Optional[ScreenOutcome] = None
    triage: TriageOutcome
    vaccine_id: Optional[str] = None
    vaccine_criteria: Optional[RecordVaccineCriteria] = None
    instruct: Optional[InstructionOutcome] = None
    registration: RegistrationOutcome
    record: Optional[Activity] = None
    outcome: str
    report: ProgrammeOutcome
    next_activity: Activity
    trace: List[TraceEntry] = Field(default_factory=list)

    model_config = {"extra": "forbid"}
