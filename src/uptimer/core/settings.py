"""Runtime settings for uptimer.

``UptimerSettings`` reads every knob from ``UPTIMER_*`` environment
variables (or a ``.env`` file) and validates it at startup.

Fields
──────
database_url             : ``memory``, ``sqlite:///path`` or a plain file path
tick_interval_seconds    : Seconds between dispatch cycles
refresh_interval_seconds : Seconds between reconcile passes while running (0 disables)
http_timeout_seconds     : Per-request timeout for health checks
user_agent               : User-Agent header sent with every check
notify_webhook_url       : URL that receives up/down transitions as JSON
log_level                : Structlog log level
log_json                 : True for JSON, False for console, None for auto

Examples:
    >>> from uptimer.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.tick_interval_seconds
    10.0

Tags:
    settings, configuration, pydantic, environment, uptimer-core
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from uptimer import USER_AGENT


def _default_database_url() -> str:
    return f"sqlite:///{Path.home() / '.uptimer' / 'uptimer.db'}"


class UptimerSettings(BaseSettings):
    """Settings for the scheduler process and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="UPTIMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = Field(
        default_factory=_default_database_url,
        description="SQLite database location",
    )

    # ── Scheduling ───────────────────────────────────────────────
    tick_interval_seconds: float = Field(default=10.0, gt=0)
    refresh_interval_seconds: float = Field(default=60.0, ge=0)

    # ── Health checks ────────────────────────────────────────────
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = USER_AGENT

    # ── Notifications ────────────────────────────────────────────
    notify_webhook_url: str | None = None

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> UptimerSettings:
    """Return the process-wide settings (cached)."""
    return UptimerSettings()


__all__ = ["UptimerSettings", "get_settings"]
