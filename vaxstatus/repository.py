"""
In-memory snapshot of every entity the status engine reads.

Entities live in maps keyed by id and relate to each other only by id; every
relation is resolved through an explicit lookup here. Scoped accessors return
records in chronological order, ties kept in the order they were appended.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, Field

from .errors import missing_relation
from .schema import (
    AuditEvent,
    Patient,
    PatientSession,
    Programme,
    Reply,
    Session,
    Vaccination,
    Vaccine,
)


T = TypeVar("T", Reply, AuditEvent, Vaccination)


def chronological(records: Iterable[T]) -> List[T]:
    # sorted() is stable, so equal timestamps keep append order
    return sorted(records, key=lambda r: r.created_at)


class Repository(BaseModel):
    programmes: Dict[str, Programme] = Field(default_factory=dict)
    vaccines: Dict[str, Vaccine] = Field(default_factory=dict)
    sessions: Dict[str, Session] = Field(default_factory=dict)
    patients: Dict[str, Patient] = Field(default_factory=dict)
    replies: Dict[str, Reply] = Field(default_factory=dict)
    audit_events: Dict[str, AuditEvent] = Field(default_factory=dict)
    vaccinations: Dict[str, Vaccination] = Field(default_factory=dict)
    patient_sessions: Dict[str, PatientSession] = Field(default_factory=dict)

    model_config = {"extra": "forbid", "frozen": True}

    # -----------------------
    # Lookup by id
    # -----------------------

    def get_programme(self, programme_id: Optional[str]) -> Optional[Programme]:
        return self.programmes.get(programme_id) if programme_id else None

    def get_vaccine(self, vaccine_id: Optional[str]) -> Optional[Vaccine]:
        return self.vaccines.get(vaccine_id) if vaccine_id else None

    def get_session(self, session_id: Optional[str]) -> Optional[Session]:
        return self.sessions.get(session_id) if session_id else None

    def get_patient(self, patient_id: Optional[str]) -> Optional[Patient]:
        return self.patients.get(patient_id) if patient_id else None

    def get_reply(self, reply_id: Optional[str]) -> Optional[Reply]:
        return self.replies.get(reply_id) if reply_id else None

    def get_patient_session(self, patient_session_id: Optional[str]) -> Optional[PatientSession]:
        return self.patient_sessions.get(patient_session_id) if patient_session_id else None

    # -----------------------
    # Relations of a patient session
    # -----------------------

    def patient_of(self, ps: PatientSession) -> Optional[Patient]:
        patient = self.get_patient(ps.patient_id)
        if patient is None:
            missing_relation("patient", ps.patient_id)
        return patient

    def session_of(self, ps: PatientSession) -> Optional[Session]:
        session = self.get_session(ps.session_id)
        if session is None:
            missing_relation("session", ps.session_id)
        return session

    def programme_of(self, ps: PatientSession) -> Optional[Programme]:
        programme = self.get_programme(ps.programme_id)
        if programme is None:
            missing_relation("programme", ps.programme_id, fatal=True)
        return programme

    def lookup_patient_session(self, patient_session_id: str) -> Optional[PatientSession]:
        """Entry point for derivations: a patient session and its programme must both resolve."""
        ps = self.get_patient_session(patient_session_id)
        if ps is None:
            missing_relation("patient session", patient_session_id, fatal=True)
            return None
        self.programme_of(ps)
        return ps

    def standard_vaccine(self, programme: Optional[Programme]) -> Optional[Vaccine]:
        for vaccine in self._vaccines_of(programme):
            if not vaccine.alternative:
                return vaccine
        return None

    def alternative_vaccine(self, programme: Optional[Programme]) -> Optional[Vaccine]:
        for vaccine in self._vaccines_of(programme):
            if vaccine.alternative:
                return vaccine
        return None

    def offers_alternative(self, programme: Optional[Programme]) -> bool:
        return self.alternative_vaccine(programme) is not None

    def _vaccines_of(self, programme: Optional[Programme]) -> List[Vaccine]:
        if programme is None:
            return []
        vaccines = []
        for vaccine_id in programme.vaccine_ids:
            vaccine = self.get_vaccine(vaccine_id)
            if vaccine is None:
                missing_relation("vaccine", vaccine_id)
                continue
            vaccines.append(vaccine)
        return vaccines

    # -----------------------
    # Reverse-index accessors
    # -----------------------

    def replies_for(self, ps: PatientSession) -> List[Reply]:
        """All replies for the patient in this programme, invalid ones included."""
        patient = self.patient_of(ps)
        if patient is None:
            return []
        replies = []
        for reply_id in patient.reply_ids:
            reply = self.get_reply(reply_id)
            if reply is None:
                missing_relation("reply", reply_id)
                continue
            if reply.programme_id == ps.programme_id:
                replies.append(reply)
        return chronological(replies)

    def audit_events_for(self, ps: PatientSession) -> List[AuditEvent]:
        """Valid events on the patient's log touching any programme of the session."""
        patient = self.patient_of(ps)
        if patient is None:
            return []
        session = self.get_session(ps.session_id)
        scope = set(session.programme_ids) if session else set()
        scope.add(ps.programme_id)
        events = []
        for event_id in patient.event_ids:
            event = self.audit_events.get(event_id)
            if event is None:
                missing_relation("audit event", event_id)
                continue
            if event.invalid:
                continue
            if scope.intersection(event.programme_ids):
                events.append(event)
        return chronological(events)

    def triage_notes(self, ps: PatientSession) -> List[AuditEvent]:
        return [
            event
            for event in self.audit_events_for(ps)
            if ps.programme_id in event.programme_ids and event.outcome is not None
        ]

    def vaccinations_for(self, ps: PatientSession) -> List[Vaccination]:
        patient = self.patient_of(ps)
        if patient is None:
            return []
        vaccinations = []
        for vaccination_id in patient.vaccination_ids:
            vaccination = self.vaccinations.get(vaccination_id)
            if vaccination is None:
                missing_relation("vaccination", vaccination_id)
                continue
            if vaccination.invalid:
                continue
            if vaccination.programme_id == ps.programme_id:
                vaccinations.append(vaccination)
        return chronological(vaccinations)

    def patient_sessions_for_session(self, session_id: str) -> List[PatientSession]:
        return [ps for ps in self.patient_sessions.values() if ps.session_id == session_id]

    def patient_sessions_for_programme(self, programme_id: str) -> List[PatientSession]:
        return [ps for ps in self.patient_sessions.values() if ps.programme_id == programme_id]

    def sibling_patient_sessions(self, ps: PatientSession) -> List[PatientSession]:
        """Patient sessions for the same patient in the same session, one per programme."""
        siblings = [
            other
            for other in self.patient_sessions.values()
            if other.patient_id == ps.patient_id and other.session_id == ps.session_id
        ]

        def _programme_name(other: PatientSession) -> str:
            programme = self.get_programme(other.programme_id)
            return programme.name if programme else ""

        return sorted(siblings, key=_programme_name)
