from datetime import date

from vaxstatus.enums import ConsentWindow, ProgrammeOutcome, RecordVaccineCriteria, SessionStatus
from vaxstatus.examples import example_snapshot
from vaxstatus.session_summary import (
    outstanding_vaccinations,
    programme_report,
    report_counts,
    session_overview,
    session_statuses,
    tally,
)


def test_session_overview_after_last_date():
    overview = session_overview(example_snapshot(), "school-1", date(2025, 10, 8))
    assert overview.status == SessionStatus.COMPLETED
    assert overview.consent_window == ConsentWindow.CLOSED
    assert not overview.active
    assert len(overview.patient_sessions) == 5


def test_closing_summary():
    overview = session_overview(example_snapshot(), "school-1", date(2025, 10, 6))
    assert overview.closing.no_consent_request == []
    assert overview.closing.no_consent_response == ["pupil-4"]
    assert "pupil-2" in overview.closing.could_not_vaccinate


def test_tally_by_programme_and_report():
    statuses = session_statuses(example_snapshot(), "school-1")
    assert tally(statuses) == 5
    assert tally(statuses, programme_id="flu") == 3
    assert tally(statuses, programme_id="hpv", report=ProgrammeOutcome.VACCINATED) == 1
    assert tally(statuses, programme_id="flu", vaccine_criteria=RecordVaccineCriteria.ANY) == 2


def test_report_counts():
    counts = report_counts(session_statuses(example_snapshot(), "school-1"))
    assert counts == {
        "No outcome yet": 3,
        "Vaccinated": 1,
        "Could not vaccinate": 1,
    }


def test_programme_report():
    repo = example_snapshot()
    assert [s.patient_id for s in programme_report(repo, "hpv", ProgrammeOutcome.VACCINATED)] == ["pupil-1"]
    assert [s.patient_id for s in programme_report(repo, "flu", ProgrammeOutcome.COULD_NOT_VACCINATE)] == ["pupil-2"]


def test_outstanding_vaccinations_across_programmes():
    repo = example_snapshot()
    assert outstanding_vaccinations(repo, "ps-2") == ["flu"]
    assert outstanding_vaccinations(repo, "missing") == []


def test_unknown_session():
    assert session_overview(example_snapshot(), "nope") is None
