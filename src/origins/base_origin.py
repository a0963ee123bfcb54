# src/origins/base_origin.py - v1
"""Abstract origin interface.

An origin produces the current bytes of one resource. The file cache
implements the same interface so it can stand in for any other origin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from datareplicator.core.models import Endpoint
from datareplicator.core.payload import Payload


class BaseOrigin(ABC):
    """Unified interface for resource origins."""

    def __init__(self, endpoint: Endpoint) -> None:
        self._endpoint = endpoint

    @property
    def endpoint(self) -> Endpoint:
        """The configured endpoint."""
        return self._endpoint

    @abstractmethod
    def load(self) -> Payload:
        """Fetch the current payload.

        Raises:
            OriginError: Origin unreachable, resource missing or response malformed.
        """

    def close(self) -> None:
        """Release held resources. Idempotent."""

    def __enter__(self) -> BaseOrigin:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"[{type(self).__name__}] uri={self._endpoint}"
