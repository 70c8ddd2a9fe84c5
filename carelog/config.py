"""Runtime settings read from the environment (``.env`` is loaded in main.py)."""

import os
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def resolve_timezone(name: str) -> tzinfo:
    """Map a timezone name to a tzinfo; ``UTC`` does not need tz data installed."""
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    return ZoneInfo(name)


@dataclass(frozen=True)
class Settings:
    timezone_name: str = field(default_factory=lambda: os.getenv("CARELOG_TIMEZONE", "UTC"))
    latest_events_limit: int = field(default_factory=lambda: int(os.getenv("LATEST_EVENTS_LIMIT", "10")))
    strict_normalization: bool = field(default_factory=lambda: _env_bool("STRICT_NORMALIZATION"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @property
    def tz(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


def default_timezone() -> tzinfo:
    return get_settings().tz
