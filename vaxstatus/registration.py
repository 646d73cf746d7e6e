from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .enums import Activity, ProgrammeOutcome, RegistrationOutcome
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import PatientSession
from .session_lifecycle import uses_registration


@dataclass(frozen=True)
class RegistrationFacts:
    registers_attendance: bool
    report: ProgrammeOutcome
    registered: Optional[RegistrationOutcome]


REGISTRATION_RULES: List[Rule[RegistrationFacts, RegistrationOutcome]] = [
    Rule("REG-01", lambda f: not f.registers_attendance, lambda f: RegistrationOutcome.PRESENT),
    # Recording an outcome implies the patient attended
    Rule("REG-02", lambda f: f.report == ProgrammeOutcome.VACCINATED, lambda f: RegistrationOutcome.COMPLETE),
    Rule("REG-03", lambda f: f.registered is not None, lambda f: f.registered),
    Rule("REG-04", always, lambda f: RegistrationOutcome.PENDING),
]


@dataclass(frozen=True)
class RecordFacts:
    next_activity: Activity
    registers_attendance: bool
    registration: RegistrationOutcome


RECORD_RULES: List[Rule[RecordFacts, Optional[Activity]]] = [
    Rule("REC-01", lambda f: f.next_activity != Activity.RECORD, lambda f: None),
    Rule(
        "REC-02",
        lambda f: f.registers_attendance and f.registration == RegistrationOutcome.PENDING,
        lambda f: Activity.REGISTER,
    ),
    Rule("REC-03", always, lambda f: Activity.RECORD),
]


def registers_attendance(repo: Repository, ps: PatientSession) -> bool:
    session = repo.session_of(ps)
    # An unknown session keeps attendance pending
    return session is None or uses_registration(session)


def resolve_registration(
    repo: Repository, ps: PatientSession, report: ProgrammeOutcome
) -> Resolution[RegistrationOutcome]:
    session = repo.get_session(ps.session_id)
    facts = RegistrationFacts(
        registers_attendance=registers_attendance(repo, ps),
        report=report,
        registered=session.attendance.get(ps.patient_id) if session is not None else None,
    )
    return first_match("registration", REGISTRATION_RULES, facts)


def resolve_record(
    repo: Repository, ps: PatientSession, next_activity: Activity, registration: RegistrationOutcome
) -> Resolution[Optional[Activity]]:
    """Gate recording on attendance: a pending patient must be registered first."""
    facts = RecordFacts(
        next_activity=next_activity,
        registers_attendance=registers_attendance(repo, ps),
        registration=registration,
    )
    return first_match("record", RECORD_RULES, facts)
