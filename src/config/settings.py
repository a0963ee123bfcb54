# src/config/settings.py - v1
"""Typed configuration loaded from the environment via pydantic-settings.

Single source of truth for replication job settings. Every field can be set
through a ``DATAREPLICATOR_``-prefixed environment variable or a ``.env`` file,
and overridden per job through ``load_settings(**overrides)``.
"""

from __future__ import annotations

import tempfile
from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a job cannot be configured (bad settings, unsupported scheme)."""


class Settings(BaseSettings):
    """Replication job settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATAREPLICATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Scheduling ===
    refresh_period: timedelta = timedelta(seconds=60)
    fail_on_init_failure: bool = False

    # === Cache ===
    cache_dir: Path = Path(tempfile.gettempdir())
    max_cache_age: timedelta = timedelta(days=3)

    # === HTTP ===
    http_timeout: float = 30.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("refresh_period", "max_cache_age")
    @classmethod
    def validate_positive_duration(cls, v: timedelta, info) -> timedelta:  # noqa: N805
        if v <= timedelta(0):
            raise ConfigurationError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ConfigurationError("http_timeout must be > 0")
        return v

    # --- Helpers ---

    @property
    def replication_cache_dir(self) -> Path:
        """Expanded cache directory."""
        return self.cache_dir.expanduser()


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-job config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If a duration is not positive.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
