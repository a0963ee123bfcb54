# tests/unit/cache/test_unit_file_cache.py - v1
"""Tests for cache/file_cache.py - atomic update, newest selection, expiry, cleanup."""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from datareplicator.cache import layout
from datareplicator.cache.file_cache import FileCache
from datareplicator.core.errors import CacheError, OriginError
from datareplicator.core.payload import Payload
from datareplicator.origins.base_origin import BaseOrigin

URI = "http://replica.test/hello.txt"


@pytest.fixture
def cache(cache_dir: Path) -> FileCache:
    return FileCache(cache_dir, URI, timedelta(days=1))


def _files(cache: FileCache, suffix: str) -> list[Path]:
    return sorted(cache.root.glob(f"*{suffix}"))


class TestFileCacheBasics:
    def test_is_an_origin(self, cache):
        assert isinstance(cache, BaseOrigin)

    def test_creates_subdirectory(self, cache_dir, cache):
        assert cache.root == (cache_dir / "datareplicator").resolve()
        assert cache.root.is_dir()

    def test_cache_error_is_origin_error(self):
        assert issubclass(CacheError, OriginError)

    def test_empty_cache(self, cache):
        with pytest.raises(CacheError, match="no cache file"):
            cache.load()


class TestUpdateAndLoad:
    def test_roundtrip(self, cache):
        cache.update(Payload("A=1 Grüße".encode("iso-8859-15")))
        loaded = cache.load()
        assert loaded.as_text() == "A=1 Grüße"
        assert loaded.charset is None

    def test_newest_wins(self, cache, make_artifact):
        make_artifact(URI, b"old", age=timedelta(minutes=2))
        make_artifact(URI, b"new", age=timedelta(minutes=1))
        assert cache.load().data == b"new"

    def test_newest_by_name_not_mtime(self, cache, make_artifact):
        newer = make_artifact(URI, b"new", age=timedelta(minutes=1))
        older = make_artifact(URI, b"old", age=timedelta(minutes=2))
        # touch the older one so its mtime is most recent
        os.utime(older, None)
        assert cache.newest_artifact() == newer
        assert cache.load().data == b"new"

    def test_other_endpoints_ignored(self, cache, make_artifact):
        make_artifact("http://replica.test/other.txt", b"other")
        with pytest.raises(CacheError):
            cache.load()

    def test_invalid_names_ignored(self, cache):
        prefix = layout.artifact_prefix(URI)
        (cache.root / f"{prefix}garbage{layout.CACHE_SUFFIX}").write_bytes(b"x")
        assert cache.artifacts() == []

    def test_retention_keeps_one_artifact(self, cache):
        for i in range(5):
            cache.update(Payload(f"A={i}".encode()))
            time.sleep(0.002)
        artifacts = _files(cache, layout.CACHE_SUFFIX)
        assert len(artifacts) == 1
        assert cache.load().data == b"A=4"

    def test_cleanup_leaves_other_endpoints(self, cache, make_artifact):
        other = make_artifact("http://replica.test/other.txt", b"other", age=timedelta(hours=1))
        cache.update(Payload(b"A=1"))
        assert other.exists()

    def test_no_temp_files_left(self, cache):
        cache.update(Payload(b"A=1"))
        assert _files(cache, layout.TEMP_SUFFIX) == []


class TestExpiry:
    def test_expired_artifact_rejected(self, cache, make_artifact):
        path = make_artifact(URI, b"A=1", age=timedelta(days=2))
        with pytest.raises(CacheError, match="expired"):
            cache.load()
        assert path.exists()

    def test_is_expired_is_silent(self, cache, make_artifact, caplog):
        path = make_artifact(URI, b"A=1", age=timedelta(days=2))
        with caplog.at_level(logging.WARNING, logger="datareplicator"):
            assert cache.is_expired(path) is True
        assert caplog.records == []

    def test_load_warns_about_expired_artifact(self, cache, make_artifact, caplog):
        make_artifact(URI, b"A=1", age=timedelta(days=2))
        with caplog.at_level(logging.WARNING, logger="datareplicator"):
            with pytest.raises(CacheError):
                cache.load()
        assert any("expired" in r.getMessage() for r in caplog.records)

    def test_fresh_artifact_accepted(self, cache, make_artifact):
        make_artifact(URI, b"A=1", age=timedelta(hours=23))
        assert cache.load().data == b"A=1"

    def test_expiry_follows_newest_only(self, cache, make_artifact):
        make_artifact(URI, b"fresh-but-older", age=timedelta(hours=1))
        newest = make_artifact(URI, b"newest", age=timedelta(minutes=1))
        stamp = time.time() - timedelta(days=3).total_seconds()
        os.utime(newest, (stamp, stamp))
        with pytest.raises(CacheError, match="expired"):
            cache.load()


class TestCrashSafety:
    def test_temp_file_never_selected(self, cache, make_artifact):
        make_artifact(URI, b"committed")
        (cache.root / layout.temp_name()).write_bytes(b"half-writ")
        assert cache.load().data == b"committed"

    def test_failed_rename_keeps_previous(self, cache):
        cache.update(Payload(b"A=1"))
        with patch("datareplicator.cache.file_cache.os.replace", side_effect=OSError("disk gone")):
            cache.update(Payload(b"A=2"))
        assert cache.load().data == b"A=1"
        assert _files(cache, layout.TEMP_SUFFIX) == []

    def test_failed_write_is_swallowed(self, cache):
        with patch("datareplicator.cache.file_cache.open", side_effect=OSError("read-only"), create=True):
            cache.update(Payload(b"A=1"))
        with pytest.raises(CacheError):
            cache.load()

    def test_stale_temp_files_removed(self, cache):
        stale = cache.root / "97b145f7-c7c6-49f8-9aeb-49bae9bf1373.temp"
        stale.write_bytes(b"data data data data")
        old = time.time() - timedelta(days=9).total_seconds()
        os.utime(stale, (old, old))
        recent = cache.root / layout.temp_name()
        recent.write_bytes(b"in flight")

        cache.update(Payload(b"A=1"))

        assert not stale.exists()
        assert recent.exists()
        assert len(_files(cache, layout.CACHE_SUFFIX)) == 1

    def test_concurrent_newer_artifact_survives(self, cache, make_artifact):
        # another process committed an artifact "in the future" of ours
        future_ts = int(time.time() * 1000) + 60_000
        prefix = layout.artifact_prefix(URI)
        foreign = cache.root / layout.artifact_name(prefix, future_ts)
        foreign.write_bytes(b"from other process")

        cache.update(Payload(b"A=1"))

        assert foreign.exists()
        assert cache.load().data == b"from other process"
