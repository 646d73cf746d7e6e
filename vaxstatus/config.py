from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class EngineSettings(BaseModel):
    """Organisation defaults applied when a snapshot leaves a value unset."""

    session_open_weeks: int = Field(default=3, ge=0)
    session_reminder_weeks: int = Field(default=1, ge=0)
    session_registration: bool = True
    # Raise on programming errors instead of degrading read paths
    strict: bool = False

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            session_open_weeks=int(os.getenv("VAXSTATUS_SESSION_OPEN_WEEKS", "3")),
            session_reminder_weeks=int(os.getenv("VAXSTATUS_SESSION_REMINDER_WEEKS", "1")),
            session_registration=_env_bool("VAXSTATUS_SESSION_REGISTRATION", True),
            strict=_env_bool("VAXSTATUS_STRICT", False),
        )


def load_dotenv(path: str | Path = ".env.local") -> None:
    """Load environment variables from a .env.local file, keeping values already set."""
    env_file = Path(path)
    if not env_file.exists():
        return
    with env_file.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                os.environ.setdefault(key.strip(), value.strip())


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    return EngineSettings.from_env()
