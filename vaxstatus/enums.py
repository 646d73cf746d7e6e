from __future__ import annotations

from enum import Enum


class AuditEventType(str, Enum):
    NOTE = "Session note"
    NOTICE = "Notice"
    PINNED = "Pinned session note"
    REMINDER = "Reminder"


class ConsentOutcome(str, Enum):
    NO_REQUEST = "Request failed"
    NO_RESPONSE = "No response"
    INCONSISTENT = "Conflicting consent"
    GIVEN = "Consent given"
    GIVEN_FOR_ALTERNATIVE = "Consent given for alternative vaccine only"
    DECLINED = "Follow up requested"
    REFUSED = "Consent refused"
    FINAL_REFUSAL = "Refusal confirmed"


class ConsentWindow(str, Enum):
    OPENING = "Opening"
    OPEN = "Open"
    CLOSED = "Closed"
    NOT_SCHEDULED = "Session not scheduled"


class EmailStatus(str, Enum):
    DELIVERED = "Delivered"
    PERMANENT = "Email address does not exist"
    TEMPORARY = "Inbox not accepting messages right now"
    TECHNICAL = "Technical failure"


class SmsStatus(str, Enum):
    DELIVERED = "Delivered"
    PERMANENT = "Not delivered"
    TEMPORARY = "Phone not accepting messages right now"
    TECHNICAL = "Technical failure"


class InstructionOutcome(str, Enum):
    GIVEN = "PSD added"
    NEEDED = "PSD not added"


class ParentalRelationship(str, Enum):
    MUM = "Mum"
    DAD = "Dad"
    GUARDIAN = "Guardian"
    FOSTERER = "Foster carer"
    OTHER = "Other"
    UNKNOWN = "Unknown"


class ProgrammeOutcome(str, Enum):
    NO_OUTCOME_YET = "No outcome yet"
    VACCINATED = "Vaccinated"
    COULD_NOT_VACCINATE = "Could not vaccinate"


class ProgrammeType(str, Enum):
    FLU = "Flu"
    HPV = "HPV"
    TD_IPV = "Td/IPV"
    MEN_ACWY = "MenACWY"
    MMR = "MMR"


class RecordVaccineCriteria(str, Enum):
    ANY = "Either"
    ALTERNATIVE_ONLY = "Alternative vaccine only"
    STANDARD_ONLY = "Standard vaccine only"


class RegistrationOutcome(str, Enum):
    PENDING = "Not registered yet"
    PRESENT = "Attending session"
    ABSENT = "Absent from session"
    COMPLETE = "Completed session"


class ReplyDecision(str, Enum):
    NO_RESPONSE = "No response"
    GIVEN = "Consent given"
    ONLY_ALTERNATIVE = "Consent given for alternative vaccine only"
    DECLINED = "Follow up requested"
    REFUSED = "Consent refused"


class ReplyMethod(str, Enum):
    WEBSITE = "Online"
    PHONE = "By phone"
    PAPER = "Paper form"
    IN_PERSON = "In person"


class ReplyRefusal(str, Enum):
    GELATINE = "Vaccine contains gelatine"
    ALREADY_GIVEN = "Vaccine already received"
    GETTING_ELSEWHERE = "Vaccine will be given elsewhere"
    MEDICAL = "Medical reasons"
    OUTSIDE_SCHOOL = "Don’t want vaccination in school"
    PERSONAL = "Personal choice"
    OTHER = "Other"


class ScreenOutcome(str, Enum):
    VACCINATE = "Safe to vaccinate"
    VACCINATE_ALTERNATIVE = "Safe to vaccinate with alternative vaccine only"
    VACCINATE_STANDARD = "Safe to vaccinate with standard vaccine only"
    NEEDS_TRIAGE = "Needs triage"
    DELAY_VACCINATION = "Delay vaccination"
    DO_NOT_VACCINATE = "Do not vaccinate"


class ScreenVaccineCriteria(str, Enum):
    ALTERNATIVE_ONLY = "The parent has consented to the alternative vaccine only"
    EITHER = "The parent has consented to the alternative vaccine being offered if the standard vaccine is not suitable"
    STANDARD_ONLY = "The parent has consented to the standard vaccine only"


class SessionStatus(str, Enum):
    UNPLANNED = "No sessions scheduled"
    PLANNED = "Scheduled session dates"
    COMPLETED = "All session dates completed"
    CLOSED = "Closed"


class SessionType(str, Enum):
    SCHOOL = "School session"
    CLINIC = "Community clinic"


class TriageOutcome(str, Enum):
    NEEDED = "Triage needed"
    COMPLETED = "Triage completed"
    NOT_NEEDED = "No triage needed"


class VaccinationOutcome(str, Enum):
    VACCINATED = "Vaccinated"
    PART_VACCINATED = "Partially vaccinated"
    ALREADY_VACCINATED = "Already had the vaccine"
    CONTRAINDICATIONS = "Child contraindicated"
    REFUSED = "Child refused"
    ABSENT = "Child absent"
    UNWELL = "Child unwell"


class VaccineMethod(str, Enum):
    INJECTION = "Injection"
    INTRANASAL = "Nasal spray"


class Activity(str, Enum):
    CONSENT = "Get consent"
    TRIAGE = "Triage"
    REGISTER = "Register attendance"
    RECORD = "Record vaccination"
    REPORT = "Report vaccination"
    DO_NOT_RECORD = "Do not record vaccination"


GIVEN_DECISIONS = (ReplyDecision.GIVEN, ReplyDecision.ONLY_ALTERNATIVE)

GIVEN_VACCINATION_OUTCOMES = (
    VaccinationOutcome.VACCINATED,
    VaccinationOutcome.PART_VACCINATED,
    VaccinationOutcome.ALREADY_VACCINATED,
)

CONSENT_GIVEN_OUTCOMES = (ConsentOutcome.GIVEN, ConsentOutcome.GIVEN_FOR_ALTERNATIVE)

CONSENT_REFUSED_OUTCOMES = (ConsentOutcome.REFUSED, ConsentOutcome.FINAL_REFUSAL)
