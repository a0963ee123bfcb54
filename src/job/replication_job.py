# src/job/replication_job.py - v1
"""Replication job: startup with cache fallback, then periodic refresh.

Construction runs one synchronous cycle (origin -> change detector ->
observer -> cache). If it fails, the job either fails immediately
(``fail_on_init_failure``) or delivers the cached copy instead. Only then is
the background scheduler started; its first tick fires one refresh period
later. Refresh failures never leave the scheduler thread: they are logged
and recorded in the job status, and the last delivered content stays
authoritative.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from pathlib import Path

import httpx
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError

from datareplicator.cache.file_cache import FileCache
from datareplicator.config.settings import ConfigurationError, Settings, load_settings
from datareplicator.core.models import Endpoint, JobStatus
from datareplicator.job.change_detector import ChangeDetector, Observer
from datareplicator.logging.context import cycle_context
from datareplicator.origins.origin_factory import create_origin

logger = logging.getLogger(__name__)


class ReplicationJob:
    """Keep one observer up to date with one endpoint."""

    def __init__(
        self,
        endpoint: str | Path | Endpoint,
        observer: Observer,
        *,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Create the job and run the startup protocol.

        Args:
            endpoint: Resource URI (resource:, file:, http:, https:) or a path.
            observer: Called with each changed ``Payload``.
            settings: Job settings. Defaults to ``load_settings()``.
            client: HTTP client to use instead of a job-owned one. It is not
                closed by the job.

        Raises:
            ConfigurationError: Unsupported scheme or invalid endpoint.
            ReplicationError: Startup load failed and no fallback applied.
        """
        self._settings = settings if settings is not None else load_settings()
        try:
            self._endpoint = Endpoint.of(endpoint)
        except ValidationError as e:
            raise ConfigurationError(f"invalid endpoint {endpoint!r}: {e}") from e

        self._origin = create_origin(
            self._endpoint, client=client, http_timeout=self._settings.http_timeout
        )
        self._cache = FileCache(
            self._settings.replication_cache_dir,
            self._endpoint.uri,
            self._settings.max_cache_age,
        )
        self._detector = ChangeDetector(observer)
        self._status = JobStatus()
        self._cycle_lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None
        self._closed = False

        try:
            self._startup()
        except BaseException:
            self._origin.close()
            raise
        self._start_scheduler()

    # --- lifecycle ---

    def _startup(self) -> None:
        with cycle_context(self._endpoint.uri, "startup"):
            try:
                self._cycle()
            except Exception:
                logger.warning("error occurred by loading %s", self._endpoint, exc_info=True)
                if self._settings.fail_on_init_failure:
                    raise
                logger.info("falling back to cached copy of %s", self._endpoint)
                with cycle_context(self._endpoint.uri, "fallback"):
                    with self._cycle_lock:
                        self._detector(self._cache.load())

    def _start_scheduler(self) -> None:
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            self.refresh,
            trigger=IntervalTrigger(seconds=self.refresh_period.total_seconds()),
            id=f"replicate:{self._endpoint.uri}",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "replicating %s every %s (max cache age %s)",
            self._endpoint, self.refresh_period, self.max_cache_age,
        )

    def close(self) -> None:
        """Stop refreshing and close the origin. Idempotent.

        An in-flight refresh is not interrupted.
        """
        if self._closed:
            return
        self._closed = True
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
        self._origin.close()
        logger.debug("replication job for %s closed", self._endpoint)

    def __enter__(self) -> ReplicationJob:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- cycles ---

    def refresh(self) -> bool:
        """Run one cycle now. Never raises.

        Returns:
            True if the cycle succeeded.
        """
        with cycle_context(self._endpoint.uri, "refresh"):
            try:
                self._cycle()
            except Exception:
                logger.warning("error occurred by loading %s", self._endpoint, exc_info=True)
                return False
        return True

    def _cycle(self) -> None:
        with self._cycle_lock:
            try:
                payload = self._origin.load()
                self._detector(payload)
            except Exception:
                self._status = self._status.record_error()
                raise
            # accepted by the observer (or unchanged); refresh the fallback copy
            self._cache.update(payload)
            self._status = self._status.record_success()

    # --- status ---

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def refresh_period(self) -> timedelta:
        return self._settings.refresh_period

    @property
    def max_cache_age(self) -> timedelta:
        return self._settings.max_cache_age

    @property
    def status(self) -> JobStatus:
        """Current status snapshot."""
        return self._status

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and not self._closed

    @property
    def cache(self) -> FileCache:
        return self._cache

    def time_since_last_success(self) -> timedelta | None:
        return self._status.time_since_success()

    def time_since_last_error(self) -> timedelta | None:
        return self._status.time_since_error()

    def __repr__(self) -> str:
        status = self._status
        return (
            f"{self._origin!r}, refresh_period={self.refresh_period}, "
            f"max_cache_age={self.max_cache_age} "
            f"(last refresh success: {status.last_success or 'none'}, "
            f"last refresh error: {status.last_error or 'none'})"
        )
