# src/cache/file_cache.py - v1
"""Crash-safe file cache holding the last accepted payload of an endpoint.

Artifacts are never rewritten in place. Each update writes a new,
timestamp-named file through a temp file and an atomic rename, and readers
pick the artifact with the greatest timestamp. Several processes may share a
cache directory: a race at worst leaves a redundant artifact behind, which
the next cleanup removes.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path

from datareplicator.cache import layout
from datareplicator.core.errors import CacheError
from datareplicator.core.models import Endpoint
from datareplicator.core.payload import Payload
from datareplicator.origins.base_origin import BaseOrigin

logger = logging.getLogger(__name__)

# Temp files only live for the duration of a write; older ones are crash leftovers.
TEMP_FILE_GRACE = timedelta(days=7)


class FileCache(BaseOrigin):
    """File-backed fallback origin for one endpoint."""

    def __init__(self, cache_dir: Path, name: str, max_cache_age: timedelta) -> None:
        root = layout.cache_root(Path(cache_dir).expanduser()).resolve()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("creating cache dir %s failed: %s", root, e)
        super().__init__(Endpoint.of(root))
        self._root = root
        self._name = name
        self._prefix = layout.artifact_prefix(name)
        self._max_cache_age = max_cache_age

    @property
    def root(self) -> Path:
        return self._root

    @property
    def name(self) -> str:
        """The cached endpoint's URI."""
        return self._name

    @property
    def max_cache_age(self) -> timedelta:
        return self._max_cache_age

    # --- write path ---

    def update(self, payload: Payload) -> None:
        """Persist ``payload`` as the newest artifact, then clean up.

        Never raises: the payload has already been delivered, so a failed
        write only costs the fallback copy.
        """
        artifact = self._root / layout.artifact_name(self._prefix, _now_ms())
        temp = self._root / layout.temp_name()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            with open(temp, "wb") as f:
                f.write(payload.as_binary())
                f.flush()
                os.fsync(f.fileno())
            # commit point: the artifact is either complete or absent
            os.replace(temp, artifact)
        except OSError as e:
            logger.warning("writing cache file %s failed: %s", artifact, e)
            _unlink_quietly(temp)
            return

        logger.debug("cache file %s written (%d bytes)", artifact.name, len(payload.data))
        self.cleanup()

    # --- read path ---

    def load(self) -> Payload:
        """Return the newest non-expired artifact.

        Raises:
            CacheError: No artifact, newest artifact expired, or unreadable.
        """
        newest = self.newest_artifact()
        if newest is None:
            raise CacheError(f"no cache file for {self._name} in {self._root}")
        if self.is_expired(newest):
            logger.warning(
                "cache file %s is expired (age %.1f days), ignoring it",
                newest.name, self._age_seconds(newest) / 86400,
            )
            raise CacheError(f"cache file {newest.name} for {self._name} is expired")
        try:
            return Payload(newest.read_bytes())
        except OSError as e:
            raise CacheError(f"loading cache file {newest} failed: {e}") from e

    def artifacts(self) -> list[tuple[int, Path]]:
        """All artifacts of this endpoint as ``(timestamp, path)``, oldest first."""
        found: list[tuple[int, Path]] = []
        try:
            entries = list(self._root.iterdir())
        except OSError as e:
            logger.warning("listing cache dir %s failed: %s", self._root, e)
            return found

        for path in entries:
            if not path.name.startswith(self._prefix) or path.suffix != layout.CACHE_SUFFIX:
                continue
            try:
                found.append((layout.parse_timestamp(path.name, self._prefix), path))
            except ValueError:
                logger.debug(
                    "%s contains cache file with invalid name %s, ignoring it",
                    self._root, path.name,
                )
        found.sort()
        return found

    def newest_artifact(self) -> Path | None:
        """Artifact with the greatest embedded timestamp, expired or not."""
        artifacts = self.artifacts()
        return artifacts[-1][1] if artifacts else None

    def is_expired(self, artifact: Path) -> bool:
        return self._age_seconds(artifact) > self._max_cache_age.total_seconds()

    @staticmethod
    def _age_seconds(artifact: Path) -> float:
        try:
            return time.time() - artifact.stat().st_mtime
        except OSError:
            return float("inf")

    # --- garbage collection ---

    def cleanup(self) -> None:
        """Remove stale temp files and every artifact older than the newest."""
        self._remove_stale_temp_files()
        self._remove_superseded_artifacts()

    def _remove_stale_temp_files(self) -> None:
        min_mtime = time.time() - TEMP_FILE_GRACE.total_seconds()
        for path in self._root.glob(f"*{layout.TEMP_SUFFIX}"):
            try:
                if path.stat().st_mtime < min_mtime:
                    path.unlink()
                    logger.info("removed stale temp file %s", path.name)
            except OSError as e:
                logger.debug("removing temp file %s failed: %s", path.name, e)

    def _remove_superseded_artifacts(self) -> None:
        # Another process may have committed a newer artifact meanwhile; only
        # strictly older ones are removed, so that one survives.
        artifacts = self.artifacts()
        if not artifacts:
            return
        newest_ts = artifacts[-1][0]
        for ts, path in artifacts:
            if ts < newest_ts:
                _unlink_quietly(path)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("removing %s failed: %s", path, e)
