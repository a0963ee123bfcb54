# src/logging/context.py - v1
"""Contextual logging support: tag records with the endpoint of the running cycle."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_endpoint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "endpoint", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    endpoint: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(endpoint=_endpoint.get(), phase=_phase.get())


@contextmanager
def cycle_context(endpoint: str, phase: str) -> Iterator[None]:
    """Bind endpoint and phase ("startup", "refresh", "fallback") for one cycle."""
    endpoint_token = _endpoint.set(endpoint)
    phase_token = _phase.set(phase)
    try:
        yield
    finally:
        _phase.reset(phase_token)
        _endpoint.reset(endpoint_token)


def clear_context() -> None:
    """Reset all context variables."""
    _endpoint.set(None)
    _phase.set(None)
