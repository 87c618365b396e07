"""Process configuration.

Everything is sourced from the environment (optionally seeded from a local
``.env`` file) and validated once at startup so a bad value fails before the
first socket is accepted.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_ROOM

STATIC_DIR = Path(__file__).resolve().parent / "static"


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=10000, ge=1, le=65535)
    default_room: str = DEFAULT_ROOM
    # Empty token leaves /logs and /logs.json unprotected.
    log_token: str = ""
    max_logs: int = Field(default=2000, ge=1)
    log_level: str = "INFO"
    static_dir: Path = STATIC_DIR

    @field_validator("default_room")
    @classmethod
    def _strip_room(cls, value: str) -> str:
        return value.strip() or DEFAULT_ROOM

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


# env var -> Settings field
_ENV_FIELDS = {
    "HOST": "host",
    "PORT": "port",
    "DEFAULT_ROOM": "default_room",
    "LOG_TOKEN": "log_token",
    "MAX_LOGS": "max_logs",
    "LOG_LEVEL": "log_level",
    "STATIC_DIR": "static_dir",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from *environ* (defaults to ``os.environ``).

    A ``.env`` file in the working directory is loaded first when reading the
    real process environment; variables already set take precedence.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    values = {field: environ[var] for var, field in _ENV_FIELDS.items() if environ.get(var)}
    return Settings(**values)


__all__ = ["Settings", "load_settings", "STATIC_DIR"]
