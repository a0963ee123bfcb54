# src/core/errors.py - v1
"""Replication error taxonomy.

``OriginError`` and its ``CacheError`` subclass are recoverable: the job logs
them and retries on the next tick. ``ObserverError`` marks data the consumer
rejected. Configuration problems raise
``datareplicator.config.settings.ConfigurationError`` and are always fatal.
"""

from __future__ import annotations


class ReplicationError(Exception):
    """Base class for every error raised while replicating a resource."""


class OriginError(ReplicationError):
    """An origin could not produce a payload (unreachable, not found, bad response)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class CacheError(OriginError):
    """The file cache has no usable artifact (missing, expired or unreadable)."""


class ObserverError(ReplicationError):
    """The registered observer raised while handling a payload."""
