# src/job/change_detector.py - v1
"""Suppress delivery of unchanged payloads."""

from __future__ import annotations

import logging
from typing import Callable

from datareplicator.core.errors import ObserverError
from datareplicator.core.payload import Payload

logger = logging.getLogger(__name__)

Observer = Callable[[Payload], None]


class ChangeDetector:
    """Forward a payload to the observer only if its fingerprint changed.

    Not thread-safe; the owning job serializes calls.
    """

    def __init__(self, observer: Observer) -> None:
        self._observer = observer
        self._last_fingerprint: int | None = None

    @property
    def last_fingerprint(self) -> int | None:
        return self._last_fingerprint

    def __call__(self, payload: Payload) -> bool:
        """Deliver ``payload`` if it is new.

        Returns:
            True if the observer was invoked.

        Raises:
            ObserverError: The observer raised. The fingerprint is not
                recorded, so the same content is offered again next cycle.
        """
        if payload.fingerprint == self._last_fingerprint:
            logger.debug("payload unchanged (fingerprint %d), skipping delivery", payload.fingerprint)
            return False
        try:
            self._observer(payload)
        except Exception as e:
            raise ObserverError(f"observer rejected payload: {e}") from e
        self._last_fingerprint = payload.fingerprint
        return True
