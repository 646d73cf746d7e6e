"""
Session status and consent window, derived from a session's dates.

All comparisons are date-only: a session is Completed the day after its last
date, and consent closes the day before it.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from .config import EngineSettings, get_settings
from .enums import ConsentWindow, SessionStatus
from .errors import missing_relation
from .repository import Repository
from .resolver import Resolution, Rule, always, first_match
from .schema import Session


DateLike = Union[date, datetime]


def as_date(value: Optional[DateLike]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class SessionFacts:
    session: Session
    today: date
    open_at: Optional[date]
    close_at: Optional[date]


def first_date(session: Session) -> Optional[date]:
    return session.dates[0] if session.dates else None


def last_date(session: Session) -> Optional[date]:
    return session.dates[-1] if session.dates else None


def remaining_dates(session: Session) -> List[date]:
    return list(session.dates[1:])


def next_date(session: Session) -> Optional[date]:
    remaining = remaining_dates(session)
    return remaining[0] if remaining else None


def open_at(session: Session, settings: Optional[EngineSettings] = None) -> Optional[date]:
    if session.open_at is not None:
        return session.open_at
    first = first_date(session)
    if first is None:
        return None
    settings = settings or get_settings()
    return first - timedelta(weeks=settings.session_open_weeks)


def close_at(session: Session) -> Optional[date]:
    # Consent for a session always closes the day before its final date
    last = last_date(session)
    return last - timedelta(days=1) if last else None


def reminder_dates(session: Session) -> List[date]:
    return [d - timedelta(days=7) for d in session.dates]


def next_reminder_date(session: Session, settings: Optional[EngineSettings] = None) -> Optional[date]:
    first = first_date(session)
    if first is None:
        return None
    settings = settings or get_settings()
    weeks = session.reminder_weeks if session.reminder_weeks is not None else settings.session_reminder_weeks
    return first - timedelta(weeks=weeks)


def is_active(session: Session, today: Optional[DateLike] = None) -> bool:
    return as_date(today) in session.dates


def uses_registration(session: Session, settings: Optional[EngineSettings] = None) -> bool:
    if session.registration is not None:
        return session.registration
    return (settings or get_settings()).session_registration


STATUS_RULES: List[Rule[SessionFacts, SessionStatus]] = [
    Rule("SES-01", lambda f: f.session.closed, lambda f: SessionStatus.CLOSED),
    Rule("SES-02", lambda f: not f.session.dates, lambda f: SessionStatus.UNPLANNED),
    Rule("SES-03", lambda f: f.today > f.session.dates[-1], lambda f: SessionStatus.COMPLETED),
    Rule("SES-04", always, lambda f: SessionStatus.PLANNED),
]

WINDOW_RULES: List[Rule[SessionFacts, ConsentWindow]] = [
    Rule("WIN-01", lambda f: not f.session.dates, lambda f: ConsentWindow.NOT_SCHEDULED),
    Rule("WIN-02", lambda f: f.today < f.open_at, lambda f: ConsentWindow.OPENING),
    Rule("WIN-03", lambda f: f.today <= f.close_at, lambda f: ConsentWindow.OPEN),
    Rule("WIN-04", always, lambda f: ConsentWindow.CLOSED),
]


def _facts(session: Session, today: Optional[DateLike], settings: Optional[EngineSettings]) -> SessionFacts:
    return SessionFacts(
        session=session,
        today=as_date(today),
        open_at=open_at(session, settings),
        close_at=close_at(session),
    )


def resolve_session_status(
    session: Session, today: Optional[DateLike] = None, settings: Optional[EngineSettings] = None
) -> Resolution[SessionStatus]:
    return first_match("session_status", STATUS_RULES, _facts(session, today, settings))


def resolve_consent_window(
    session: Session, today: Optional[DateLike] = None, settings: Optional[EngineSettings] = None
) -> Resolution[ConsentWindow]:
    return first_match("consent_window", WINDOW_RULES, _facts(session, today, settings))


def get_session_status(
    repo: Repository, session_id: str, today: Optional[DateLike] = None
) -> Optional[SessionStatus]:
    session = repo.get_session(session_id)
    if session is None:
        missing_relation("session", session_id)
        return None
    return resolve_session_status(session, today).value


def get_consent_window(
    repo: Repository, session_id: str, today: Optional[DateLike] = None
) -> Optional[ConsentWindow]:
    session = repo.get_session(session_id)
    if session is None:
        missing_relation("session", session_id)
        return None
    return resolve_consent_window(session, today).value
