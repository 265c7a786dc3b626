"""
Centralized configuration for the load calendar.

All values that vary by deployment belong here and are read from the
environment once, at startup, into a frozen Settings object. Nothing else
reads os.environ.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loadcal import paths
from loadcal.errors import ConfigError
from loadcal.models import DEFAULT_PERSON_CAPACITY

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_bool(name: str, default: bool | None) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Deployment settings. Build with Settings.from_env() or directly in tests."""

    db_path: Path
    api_key: str = ""
    webhook_url: str = ""
    webhook_timeout: float = 10.0
    alert_workers: int = 4
    auto_create_missing_assignees: bool = True
    default_person_capacity: float = DEFAULT_PERSON_CAPACITY
    read_timeout: float = 15.0
    log_level: str = "INFO"
    log_json: bool | None = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    port: int = 8080

    @property
    def alerts_enabled(self) -> bool:
        return bool(self.webhook_url)

    @classmethod
    def from_env(cls) -> "Settings":
        cors_env = _env_str("CORS_ORIGINS", "*")
        cors_origins = ["*"] if cors_env == "*" else [o.strip() for o in cors_env.split(",") if o.strip()]

        return cls(
            db_path=paths.db_path(),
            # x-api-key for mutating routes; empty means development mode (no check)
            api_key=_env_str("LOADCAL_API_KEY"),
            # Overload alert destination; empty disables alerts
            webhook_url=_env_str("LOADCAL_WEBHOOK_URL"),
            webhook_timeout=_env_float("LOADCAL_WEBHOOK_TIMEOUT", 10.0, minimum=0.1),
            alert_workers=_env_int("LOADCAL_ALERT_WORKERS", 4),
            auto_create_missing_assignees=_env_bool("LOADCAL_AUTO_CREATE_ASSIGNEES", True),
            default_person_capacity=_env_float("LOADCAL_DEFAULT_CAPACITY", DEFAULT_PERSON_CAPACITY),
            read_timeout=_env_float("LOADCAL_READ_TIMEOUT", 15.0, minimum=0.1),
            log_level=_env_str("LOADCAL_LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOADCAL_LOG_JSON", None),
            cors_origins=cors_origins,
            port=_env_int("PORT", 8080),
        )
