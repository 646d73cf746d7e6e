"""
Append-only writes made by collaborators before the engine is asked to derive
anything. Each function returns a new snapshot and leaves the given one as it
was; records are never edited in place, only invalidated and superseded.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from .enums import AuditEventType, RegistrationOutcome, ScreenOutcome
from .errors import DuplicateRecordError, InvalidTransitionError, MissingRelationError
from .repository import Repository
from .schema import AuditEvent, Patient, PatientSession, Reply, Vaccination


EXPLICIT_REGISTRATIONS = (RegistrationOutcome.PRESENT, RegistrationOutcome.ABSENT)


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_patient(repo: Repository, patient_id: str) -> Patient:
    patient = repo.get_patient(patient_id)
    if patient is None:
        raise MissingRelationError("patient", patient_id)
    return patient


def _require_patient_session(repo: Repository, patient_session_id: str) -> PatientSession:
    ps = repo.get_patient_session(patient_session_id)
    if ps is None:
        raise MissingRelationError("patient session", patient_session_id)
    return ps


def _add_event(repo: Repository, patient: Patient, event: AuditEvent) -> Repository:
    if event.id in repo.audit_events:
        raise DuplicateRecordError(f"audit event already exists: {event.id}")
    patient = patient.model_copy(update={"event_ids": [*patient.event_ids, event.id]})
    return repo.model_copy(
        update={
            "audit_events": {**repo.audit_events, event.id: event},
            "patients": {**repo.patients, patient.id: patient},
        }
    )


def append_reply(repo: Repository, reply: Reply) -> Repository:
    if reply.id in repo.replies:
        raise DuplicateRecordError(f"reply already exists: {reply.id}")
    patient = _require_patient(repo, reply.patient_id)
    patient = patient.model_copy(update={"reply_ids": [*patient.reply_ids, reply.id]})
    return repo.model_copy(
        update={
            "replies": {**repo.replies, reply.id: reply},
            "patients": {**repo.patients, patient.id: patient},
        }
    )


def invalidate_reply(repo: Repository, reply_id: str, *, created_at: datetime) -> Repository:
    reply = repo.get_reply(reply_id)
    if reply is None:
        raise MissingRelationError("reply", reply_id)
    if reply.invalid:
        return repo
    repo = repo.model_copy(update={"replies": {**repo.replies, reply.id: reply.model_copy(update={"invalid": True})}})
    event = AuditEvent(
        id=_new_id(),
        created_at=created_at,
        name=f"{reply.decision.value} marked as invalid",
        programme_ids=[reply.programme_id],
    )
    return _add_event(repo, _require_patient(repo, reply.patient_id), event)


def replace_reply(repo: Repository, old_reply_id: str, new_reply: Reply) -> Repository:
    """Edit a reply by invalidating the old one and appending its replacement."""
    repo = invalidate_reply(repo, old_reply_id, created_at=new_reply.created_at)
    return append_reply(repo, new_reply)


def record_triage(
    repo: Repository,
    patient_session_id: str,
    outcome: ScreenOutcome,
    *,
    created_at: datetime,
    note: str = "",
    event_id: Optional[str] = None,
) -> Repository:
    ps = _require_patient_session(repo, patient_session_id)
    event = AuditEvent(
        id=event_id or _new_id(),
        created_at=created_at,
        name=f"Triaged decision: {outcome.value}",
        type=AuditEventType.NOTE,
        note=note,
        outcome=outcome,
        programme_ids=[ps.programme_id],
    )
    return _add_event(repo, _require_patient(repo, ps.patient_id), event)


def record_vaccination(repo: Repository, vaccination: Vaccination) -> Repository:
    if vaccination.id in repo.vaccinations:
        raise DuplicateRecordError(f"vaccination already exists: {vaccination.id}")
    if vaccination.patient_session_id is None:
        raise MissingRelationError("patient session", None)
    ps = _require_patient_session(repo, vaccination.patient_session_id)
    patient = _require_patient(repo, ps.patient_id)
    patient = patient.model_copy(update={"vaccination_ids": [*patient.vaccination_ids, vaccination.id]})
    repo = repo.model_copy(
        update={
            "vaccinations": {**repo.vaccinations, vaccination.id: vaccination},
            "patients": {**repo.patients, patient.id: patient},
        }
    )
    event = AuditEvent(
        id=_new_id(),
        created_at=vaccination.created_at,
        name=f"Vaccination outcome: {vaccination.outcome.value}",
        programme_ids=[vaccination.programme_id],
    )
    return _add_event(repo, patient, event)


def give_instruction(
    repo: Repository, patient_session_id: str, *, created_at: datetime, instruction_id: Optional[str] = None
) -> Repository:
    ps = _require_patient_session(repo, patient_session_id)
    ps = ps.model_copy(update={"instruction_id": instruction_id or _new_id()})
    repo = repo.model_copy(update={"patient_sessions": {**repo.patient_sessions, ps.id: ps}})
    event = AuditEvent(id=_new_id(), created_at=created_at, name="PSD added", programme_ids=[ps.programme_id])
    return _add_event(repo, _require_patient(repo, ps.patient_id), event)


def register_attendance(
    repo: Repository, patient_session_id: str, outcome: RegistrationOutcome, *, created_at: datetime
) -> Repository:
    """Record a clinician's attendance decision for today's session.

    Only Present and Absent can be written. Complete follows from a recorded
    outcome, and nothing moves a patient back to Pending.
    """
    if outcome not in EXPLICIT_REGISTRATIONS:
        raise InvalidTransitionError(f"cannot register attendance as {outcome.value}")
    ps = _require_patient_session(repo, patient_session_id)
    session = repo.get_session(ps.session_id)
    if session is None:
        raise MissingRelationError("session", ps.session_id)
    session = session.model_copy(update={"attendance": {**session.attendance, ps.patient_id: outcome}})
    repo = repo.model_copy(update={"sessions": {**repo.sessions, session.id: session}})
    event = AuditEvent(
        id=_new_id(),
        created_at=created_at,
        name=outcome.value,
        programme_ids=list(session.programme_ids),
    )
    return _add_event(repo, _require_patient(repo, ps.patient_id), event)
