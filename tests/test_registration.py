from vaxstatus.engine import decide, get_registration_outcome
from vaxstatus.enums import Activity, RegistrationOutcome, ReplyDecision, VaccinationOutcome
from vaxstatus.schema import PatientSession

from builders import build_repo, reply, session, vaccination


def test_pending_until_registered():
    repo = build_repo([reply()])
    status = decide(repo, "ps-1")
    assert status.registration == RegistrationOutcome.PENDING
    assert status.next_activity == Activity.RECORD
    assert status.record == Activity.REGISTER


def test_registered_patient_can_be_recorded():
    repo = build_repo([reply()], session_=session(attendance={"p-1": RegistrationOutcome.PRESENT}))
    status = decide(repo, "ps-1")
    assert status.registration == RegistrationOutcome.PRESENT
    assert status.record == Activity.RECORD


def test_absent_is_kept():
    repo = build_repo([reply()], session_=session(attendance={"p-1": RegistrationOutcome.ABSENT}))
    assert get_registration_outcome(repo, "ps-1") == RegistrationOutcome.ABSENT


def test_vaccinated_completes_registration_whatever_was_written():
    repo = build_repo(
        [reply()],
        vaccinations=[vaccination(VaccinationOutcome.VACCINATED, 30)],
        session_=session(attendance={"p-1": RegistrationOutcome.ABSENT}),
    )
    assert get_registration_outcome(repo, "ps-1") == RegistrationOutcome.COMPLETE


def test_session_without_registration_is_always_present():
    repo = build_repo([reply()], session_=session(registration=False))
    status = decide(repo, "ps-1")
    assert status.registration == RegistrationOutcome.PRESENT
    assert status.record == Activity.RECORD


def test_record_is_only_set_when_recording_is_next():
    repo = build_repo([reply(ReplyDecision.REFUSED)])
    status = decide(repo, "ps-1")
    assert status.next_activity == Activity.DO_NOT_RECORD
    assert status.record is None


def test_unknown_session_stays_pending():
    ps = PatientSession(id="ps-1", patient_id="p-1", programme_id="flu", session_id="gone")
    repo = build_repo([reply()], patient_session=ps)
    status = decide(repo, "ps-1")
    assert status.registration == RegistrationOutcome.PENDING
    assert status.next_activity == Activity.RECORD
    assert status.record == Activity.REGISTER
    assert get_registration_outcome(repo, "ps-1") == RegistrationOutcome.PENDING
