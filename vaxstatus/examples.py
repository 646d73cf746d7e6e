from __future__ import annotations

from datetime import date, datetime

from .enums import (
    ParentalRelationship,
    ProgrammeType,
    ReplyDecision,
    ReplyMethod,
    ReplyRefusal,
    VaccinationOutcome,
    VaccineMethod,
)
from .repository import Repository
from .schema import (
    HealthAnswer,
    Parent,
    Patient,
    PatientSession,
    Programme,
    Reply,
    Session,
    Vaccination,
    Vaccine,
)


def _parent(name: str, relationship: ParentalRelationship) -> Parent:
    return Parent(full_name=name, relationship=relationship)


def example_snapshot() -> Repository:
    """A school session running flu and HPV for four pupils."""
    vaccines = [
        Vaccine(id="flu-nasal", brand="Fluenz", method=VaccineMethod.INTRANASAL),
        Vaccine(id="flu-injection", brand="Cell-based Trivalent Influenza Vaccine", method=VaccineMethod.INJECTION, alternative=True),
        Vaccine(id="hpv-injection", brand="Gardasil 9", method=VaccineMethod.INJECTION),
    ]
    programmes = [
        Programme(id="flu", name="Flu", type=ProgrammeType.FLU, vaccine_ids=["flu-nasal", "flu-injection"]),
        Programme(id="hpv", name="HPV", type=ProgrammeType.HPV, vaccine_ids=["hpv-injection"]),
    ]
    session = Session(
        id="school-1",
        dates=[date(2025, 10, 6), date(2025, 10, 7)],
        programme_ids=["flu", "hpv"],
    )

    replies = [
        Reply(
            id="reply-1",
            patient_id="pupil-1",
            programme_id="flu",
            session_id="school-1",
            created_at=datetime(2025, 9, 20, 9, 0),
            method=ReplyMethod.PHONE,
            parent=_parent("Jane Doe", ParentalRelationship.MUM),
            decision=ReplyDecision.GIVEN,
            alternative=True,
            health_answers={"allergy": HealthAnswer(answer="No")},
        ),
        Reply(
            id="reply-2",
            patient_id="pupil-1",
            programme_id="hpv",
            session_id="school-1",
            created_at=datetime(2025, 9, 20, 9, 5),
            method=ReplyMethod.PHONE,
            parent=_parent("Jane Doe", ParentalRelationship.MUM),
            decision=ReplyDecision.GIVEN,
        ),
        Reply(
            id="reply-3",
            patient_id="pupil-2",
            programme_id="flu",
            session_id="school-1",
            created_at=datetime(2025, 9, 21, 18, 30),
            method=ReplyMethod.PAPER,
            parent=_parent("Sam Smith", ParentalRelationship.DAD),
            decision=ReplyDecision.REFUSED,
            refusal_reason=ReplyRefusal.GELATINE,
        ),
        Reply(
            id="reply-4",
            patient_id="pupil-3",
            programme_id="flu",
            session_id="school-1",
            created_at=datetime(2025, 9, 22, 12, 0),
            method=ReplyMethod.PHONE,
            parent=_parent("Alex Brown", ParentalRelationship.GUARDIAN),
            decision=ReplyDecision.GIVEN,
            health_answers={
                "asthma": HealthAnswer(answer="Yes"),
                "asthmaSteroids": HealthAnswer(answer="Yes", details="Oral steroids in August"),
            },
        ),
    ]

    patients = [
        Patient(id="pupil-1", first_name="Ava", last_name="Doe", programme_ids=["flu", "hpv"], reply_ids=["reply-1", "reply-2"], vaccination_ids=["vaccination-1"]),
        Patient(id="pupil-2", first_name="Ben", last_name="Smith", programme_ids=["flu"], reply_ids=["reply-3"]),
        Patient(id="pupil-3", first_name="Cara", last_name="Brown", programme_ids=["flu"], reply_ids=["reply-4"]),
        Patient(id="pupil-4", first_name="Dev", last_name="Patel", programme_ids=["hpv"]),
    ]

    patient_sessions = [
        PatientSession(id="ps-1", patient_id="pupil-1", programme_id="flu", session_id="school-1"),
        PatientSession(id="ps-2", patient_id="pupil-1", programme_id="hpv", session_id="school-1"),
        PatientSession(id="ps-3", patient_id="pupil-2", programme_id="flu", session_id="school-1"),
        PatientSession(id="ps-4", patient_id="pupil-3", programme_id="flu", session_id="school-1"),
        PatientSession(id="ps-5", patient_id="pupil-4", programme_id="hpv", session_id="school-1"),
    ]

    vaccinations = [
        Vaccination(
            id="vaccination-1",
            patient_session_id="ps-2",
            programme_id="hpv",
            created_at=datetime(2025, 10, 6, 10, 15),
            outcome=VaccinationOutcome.VACCINATED,
            vaccine_id="hpv-injection",
        ),
    ]

    return Repository(
        programmes={p.id: p for p in programmes},
        vaccines={v.id: v for v in vaccines},
        sessions={session.id: session},
        patients={p.id: p for p in patients},
        replies={r.id: r for r in replies},
        vaccinations={v.id: v for v in vaccinations},
        patient_sessions={ps.id: ps for ps in patient_sessions},
    )
