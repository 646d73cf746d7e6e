from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .engine import decide, decide_all
from .enums import (
    Activity,
    ConsentOutcome,
    ConsentWindow,
    InstructionOutcome,
    ProgrammeOutcome,
    RecordVaccineCriteria,
    SessionStatus,
)
from .errors import missing_relation
from .repository import Repository
from .schema import PatientSessionStatus
from .session_lifecycle import DateLike, is_active, resolve_consent_window, resolve_session_status


class SessionActivity(BaseModel):
    get_consent: int = 0
    instruct: int = 0
    still_to_vaccinate: int = 0


class ClosingSummary(BaseModel):
    no_consent_request: List[str] = Field(default_factory=list)
    no_consent_response: List[str] = Field(default_factory=list)
    could_not_vaccinate: List[str] = Field(default_factory=list)


class SessionOverview(BaseModel):
    session_id: str
    status: SessionStatus
    consent_window: ConsentWindow
    active: bool
    activity: SessionActivity
    closing: ClosingSummary
    patient_sessions: List[PatientSessionStatus] = Field(default_factory=list)


def session_statuses(repo: Repository, session_id: str) -> List[PatientSessionStatus]:
    ids = [ps.id for ps in repo.patient_sessions_for_session(session_id)]
    return decide_all(repo, ids)


def session_activity(statuses: List[PatientSessionStatus]) -> SessionActivity:
    return SessionActivity(
        get_consent=sum(1 for s in statuses if s.consent == ConsentOutcome.NO_RESPONSE),
        instruct=sum(
            1
            for s in statuses
            if s.report == ProgrammeOutcome.NO_OUTCOME_YET and s.instruct == InstructionOutcome.NEEDED
        ),
        still_to_vaccinate=sum(1 for s in statuses if s.next_activity == Activity.RECORD),
    )


def closing_summary(statuses: List[PatientSessionStatus]) -> ClosingSummary:
    """Patients to follow up before a session is closed."""
    return ClosingSummary(
        no_consent_request=sorted({s.patient_id for s in statuses if s.consent == ConsentOutcome.NO_REQUEST}),
        no_consent_response=sorted({s.patient_id for s in statuses if s.consent == ConsentOutcome.NO_RESPONSE}),
        could_not_vaccinate=sorted({s.patient_id for s in statuses if s.report != ProgrammeOutcome.VACCINATED}),
    )


def tally(
    statuses: List[PatientSessionStatus],
    programme_id: Optional[str] = None,
    report: Optional[ProgrammeOutcome] = None,
    vaccine_criteria: Optional[RecordVaccineCriteria] = None,
) -> int:
    count = 0
    for s in statuses:
        if programme_id is not None and s.programme_id != programme_id:
            continue
        if report is not None and s.report != report:
            continue
        if vaccine_criteria is not None and s.vaccine_criteria != vaccine_criteria:
            continue
        count += 1
    return count


def session_overview(repo: Repository, session_id: str, today: Optional[DateLike] = None) -> Optional[SessionOverview]:
    session = repo.get_session(session_id)
    if session is None:
        missing_relation("session", session_id)
        return None
    statuses = session_statuses(repo, session_id)
    return SessionOverview(
        session_id=session.id,
        status=resolve_session_status(session, today).value,
        consent_window=resolve_consent_window(session, today).value,
        active=is_active(session, today),
        activity=session_activity(statuses),
        closing=closing_summary(statuses),
        patient_sessions=statuses,
    )


def programme_report(repo: Repository, programme_id: str, outcome: ProgrammeOutcome) -> List[PatientSessionStatus]:
    ids = [ps.id for ps in repo.patient_sessions_for_programme(programme_id)]
    return [s for s in decide_all(repo, ids) if s.report == outcome]


def outstanding_vaccinations(repo: Repository, patient_session_id: str) -> List[str]:
    """Programme ids still to record for the same patient in the same session."""
    ps = repo.get_patient_session(patient_session_id)
    if ps is None:
        return []
    outstanding = []
    for sibling in repo.sibling_patient_sessions(ps):
        status = decide(repo, sibling.id)
        if status is not None and status.next_activity == Activity.RECORD:
            outstanding.append(sibling.programme_id)
    return outstanding


def report_counts(statuses: List[PatientSessionStatus]) -> Dict[str, int]:
    counts = {outcome.value: 0 for outcome in ProgrammeOutcome}
    for s in statuses:
        counts[s.report.value] += 1
    return counts
