from datetime import date, datetime

import pytest
from pydantic import ValidationError

from vaxstatus.config import EngineSettings
from vaxstatus.enums import ConsentWindow, SessionStatus
from vaxstatus.session_lifecycle import (
    close_at,
    get_consent_window,
    get_session_status,
    is_active,
    next_date,
    next_reminder_date,
    open_at,
    reminder_dates,
    resolve_consent_window,
    resolve_session_status,
    uses_registration,
)

from builders import build_repo, session


def test_completed_the_day_after_the_last_date():
    s = session(dates=[date(2025, 1, 10)])
    assert resolve_session_status(s, date(2025, 1, 11)).value == SessionStatus.COMPLETED
    assert resolve_session_status(s, date(2025, 1, 10)).value == SessionStatus.PLANNED
    assert resolve_session_status(s, date(2025, 1, 5)).value == SessionStatus.PLANNED


def test_no_dates_is_unplanned():
    res = resolve_session_status(session(dates=[]), date(2025, 1, 5))
    assert res.value == SessionStatus.UNPLANNED
    assert res.rule_id == "SES-02"


def test_closed_wins_over_dates():
    s = session(dates=[date(2025, 1, 10)], closed=True)
    assert resolve_session_status(s, date(2025, 1, 5)).value == SessionStatus.CLOSED
    assert resolve_session_status(session(dates=[], closed=True), date(2025, 1, 5)).value == SessionStatus.CLOSED


def test_datetime_today_compares_by_date():
    s = session(dates=[date(2025, 1, 10)])
    assert resolve_session_status(s, datetime(2025, 1, 10, 23, 59)).value == SessionStatus.PLANNED


def test_consent_window_boundaries():
    s = session(dates=[date(2025, 3, 3), date(2025, 3, 4)])
    assert open_at(s) == date(2025, 2, 10)
    assert close_at(s) == date(2025, 3, 3)
    assert resolve_consent_window(s, date(2025, 2, 9)).value == ConsentWindow.OPENING
    assert resolve_consent_window(s, date(2025, 2, 10)).value == ConsentWindow.OPEN
    assert resolve_consent_window(s, date(2025, 3, 3)).value == ConsentWindow.OPEN
    assert resolve_consent_window(s, date(2025, 3, 4)).value == ConsentWindow.CLOSED


def test_consent_window_without_dates():
    assert resolve_consent_window(session(dates=[]), date(2025, 1, 1)).value == ConsentWindow.NOT_SCHEDULED


def test_open_at_override_and_configured_offset():
    s = session(dates=[date(2025, 3, 3)])
    assert open_at(s, EngineSettings(session_open_weeks=1)) == date(2025, 2, 24)
    overridden = session(dates=[date(2025, 3, 3)], open_at=date(2025, 1, 1))
    assert open_at(overridden) == date(2025, 1, 1)


def test_reminders_and_remaining_dates():
    s = session(dates=[date(2025, 3, 3), date(2025, 3, 10)])
    assert reminder_dates(s) == [date(2025, 2, 24), date(2025, 3, 3)]
    assert next_reminder_date(s) == date(2025, 2, 24)
    assert next_reminder_date(session(dates=[date(2025, 3, 3)], reminder_weeks=2)) == date(2025, 2, 17)
    assert next_date(s) == date(2025, 3, 10)
    assert next_date(session(dates=[date(2025, 3, 3)])) is None


def test_is_active_only_on_session_dates():
    s = session(dates=[date(2025, 3, 3), date(2025, 3, 10)])
    assert is_active(s, date(2025, 3, 10))
    assert not is_active(s, date(2025, 3, 4))


def test_registration_defaults_to_organisation_setting():
    assert uses_registration(session())
    assert not uses_registration(session(), EngineSettings(session_registration=False))
    assert not uses_registration(session(registration=False))


def test_dates_must_be_sorted_without_duplicates():
    with pytest.raises(ValidationError):
        session(dates=[date(2025, 3, 10), date(2025, 3, 3)])
    with pytest.raises(ValidationError):
        session(dates=[date(2025, 3, 3), date(2025, 3, 3)])


def test_unknown_session_has_no_status():
    repo = build_repo()
    assert get_session_status(repo, "missing", date(2025, 1, 1)) is None
    assert get_consent_window(repo, "missing", date(2025, 1, 1)) is None
    assert get_session_status(repo, "s-1", date(2025, 10, 7)) == SessionStatus.COMPLETED
