"""
Centralized settings for relkeep.

:class:`RelkeepSettings` is the single validated source of configuration.
All fields can be set through ``RELKEEP_*`` environment variables (e.g.
``RELKEEP_DATABASE_URL=postgresql://...``) or a ``.env`` file.

Examples:
    >>> from relkeep.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.database_url
    'sqlite:///relkeep.db'

Tags:
    settings, configuration, pydantic, environment, relkeep
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RelkeepSettings(BaseSettings):
    """relkeep configuration.

    Fields
    ──────
    database_url : SQLAlchemy URL of the entity store
    echo_sql     : Log every SQL statement (SQLAlchemy ``echo``)
    log_level    : structlog level
    log_json     : JSON log output; ``None`` auto-detects from the TTY
    service_name : ``service.name`` attached to every log record
    """

    model_config = SettingsConfigDict(
        env_prefix="RELKEEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///relkeep.db")
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "relkeep"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


_settings_cache: dict[str, RelkeepSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RelkeepSettings:
    """Load, validate, and cache a :class:`RelkeepSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = RelkeepSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (used by tests that patch the environment)."""
    _settings_cache.clear()


__all__ = [
    "RelkeepSettings",
    "get_settings",
    "clear_settings_cache",
]
