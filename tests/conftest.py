import pytest

from vaxstatus.config import get_settings


SETTINGS_ENV = (
    "VAXSTATUS_SESSION_OPEN_WEEKS",
    "VAXSTATUS_SESSION_REMINDER_WEEKS",
    "VAXSTATUS_SESSION_REGISTRATION",
    "VAXSTATUS_STRICT",
)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
