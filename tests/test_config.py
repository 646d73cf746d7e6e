from pathlib import Path

import pytest
from pydantic import ValidationError

from vaxstatus.config import EngineSettings, get_settings, load_dotenv


def test_defaults():
    settings = get_settings()
    assert settings.session_open_weeks == 3
    assert settings.session_reminder_weeks == 1
    assert settings.session_registration is True
    assert settings.strict is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("VAXSTATUS_SESSION_OPEN_WEEKS", "4")
    monkeypatch.setenv("VAXSTATUS_SESSION_REGISTRATION", "no")
    monkeypatch.setenv("VAXSTATUS_STRICT", "Yes")
    settings = EngineSettings.from_env()
    assert settings.session_open_weeks == 4
    assert settings.session_registration is False
    assert settings.strict is True


def test_settings_are_cached_until_cleared(monkeypatch):
    assert get_settings() is get_settings()
    monkeypatch.setenv("VAXSTATUS_SESSION_OPEN_WEEKS", "2")
    assert get_settings().session_open_weeks == 3
    get_settings.cache_clear()
    assert get_settings().session_open_weeks == 2


def test_negative_weeks_rejected():
    with pytest.raises(ValidationError):
        EngineSettings(session_open_weeks=-1)


def test_load_dotenv_keeps_existing_values(tmp_path: Path, monkeypatch):
    env_file = tmp_path / ".env.local"
    env_file.write_text(
        "# local overrides\nVAXSTATUS_SESSION_OPEN_WEEKS=5\nVAXSTATUS_STRICT=true\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("VAXSTATUS_STRICT", "false")
    # Registered with monkeypatch so the value loaded below is undone
    monkeypatch.setenv("VAXSTATUS_SESSION_OPEN_WEEKS", "")
    monkeypatch.delenv("VAXSTATUS_SESSION_OPEN_WEEKS")
    load_dotenv(env_file)
    settings = EngineSettings.from_env()
    assert settings.session_open_weeks == 5
    assert settings.strict is False


def test_load_dotenv_without_file(tmp_path: Path):
    load_dotenv(tmp_path / "missing.env")
