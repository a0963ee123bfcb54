# src/core/models.py - v1
"""Core domain models: Endpoint and JobStatus."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict, field_validator


class Endpoint(BaseModel):
    """Immutable origin locator: a URI such as ``https://host/data.txt``."""

    model_config = ConfigDict(frozen=True)

    uri: str

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, v: str) -> str:  # noqa: N805
        v = v.strip()
        if not v:
            raise ValueError("endpoint uri must not be empty")
        return v

    @classmethod
    def of(cls, value: str | Path | Endpoint) -> Endpoint:
        """Coerce a string, filesystem path or Endpoint into an Endpoint."""
        if isinstance(value, Endpoint):
            return value
        if isinstance(value, Path):
            return cls(uri=value.expanduser().resolve().as_uri())
        return cls(uri=value)

    @property
    def scheme(self) -> str:
        """Lower-cased URI scheme ("" when the URI has none)."""
        return urlsplit(self.uri).scheme.lower()

    @property
    def path(self) -> str:
        """Percent-decoded scheme-specific path."""
        return unquote(urlsplit(self.uri).path)

    def __str__(self) -> str:
        return self.uri


class JobStatus(BaseModel):
    """Snapshot of a job's refresh history.

    Instances are immutable; the job swaps in a new snapshot after every
    cycle, so readers always see a consistent pair of instants.
    """

    model_config = ConfigDict(frozen=True)

    last_success: datetime | None = None
    last_error: datetime | None = None

    def record_success(self, at: datetime | None = None) -> JobStatus:
        return self.model_copy(update={"last_success": at or _utcnow()})

    def record_error(self, at: datetime | None = None) -> JobStatus:
        return self.model_copy(update={"last_error": at or _utcnow()})

    def time_since_success(self) -> timedelta | None:
        return None if self.last_success is None else _utcnow() - self.last_success

    def time_since_error(self) -> timedelta | None:
        return None if self.last_error is None else _utcnow() - self.last_error


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
