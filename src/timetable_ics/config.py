"""Converter settings loaded from environment variables.

Only the command line reads these; the conversion functions take their
options as arguments.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Literal, Mapping

from pydantic import Field
from pydantic_settings import BaseSettings

from .ics import DEFAULT_PRODID


class Settings(BaseSettings):
    """Settings read from ``TIMETABLE_*`` environment variables or ``.env``."""

    # Conversion
    strict: bool = Field(
        default=True,
        description="Abort on the first invalid event instead of skipping it",
    )
    end_style: Literal["duration", "dtend"] = Field(
        default="duration",
        description="Emit DURATION:PT{n}M or a DTEND date-time per event",
    )
    prodid: str = Field(
        default=DEFAULT_PRODID,
        description="PRODID of generated calendars",
    )

    # Fetching
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds when fetching a timetable page",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "TIMETABLE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the settings singleton, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_course_names(path: str | Path) -> Mapping[str, str]:
    """Read a course code to name mapping from a ``CODE=Name`` file.

    Blank lines and lines starting with ``#`` are ignored.

    :param path: The mapping file.
    :returns: A read-only mapping.
    :raises ValueError: If a line has no ``=``.
    """
    names: dict[str, str] = {}
    for lineno, raw in enumerate(
        Path(path).read_text(encoding="utf-8").splitlines(), start=1
    ):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        code, sep, name = line.partition("=")
        if not sep:
            raise ValueError(f"{path}:{lineno}: expected CODE=Name, got {line!r}")
        names[code.strip()] = name.strip()
    return MappingProxyType(names)
