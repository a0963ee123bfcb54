# tests/conftest.py - v1
"""Shared test fixtures for unit and integration tests.

Provides isolated settings, sample resource files and mock HTTP servers.
No network access: HTTP is served through httpx.MockTransport.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable

import httpx
import pytest

from datareplicator.cache import layout
from datareplicator.config.settings import Settings
from datareplicator.logging.context import clear_context

HELLO_UTF8 = "German=Grüße\nGreek=Καλημέρα\nChinese=你好\n"
HELLO_LATIN = "German=Grüße, Straße\n"


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    clear_context()
    root = logging.getLogger("datareplicator")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    d = tmp_path / "cache"
    d.mkdir()
    return d


@pytest.fixture
def settings(cache_dir: Path) -> Settings:
    """Settings isolated from the environment, with a long refresh period."""
    return Settings(
        _env_file=None,
        cache_dir=cache_dir,
        refresh_period=timedelta(hours=1),
        max_cache_age=timedelta(days=1),
    )


@pytest.fixture
def hello_file(tmp_path: Path) -> Path:
    path = tmp_path / "hello.utf8.txt"
    path.write_bytes(HELLO_UTF8.encode("utf-8"))
    return path


class FakeServer:
    """Programmable HTTP handler recording every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(404)
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def serve(
        self,
        body: bytes,
        content_type: str = "text/plain",
        etag: str | None = None,
        status: int = 200,
    ) -> None:
        headers = {"Content-Type": content_type}
        if etag:
            headers["etag"] = etag
        self.responder = lambda request: httpx.Response(status, content=body, headers=headers)

    def down(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.responder = refuse


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http_client(server: FakeServer):
    client = httpx.Client(transport=httpx.MockTransport(server))
    yield client
    client.close()


def write_artifact(
    cache_dir: Path, uri: str, content: bytes, age: timedelta = timedelta(0)
) -> Path:
    """Place a committed cache artifact for ``uri`` with the given file age."""
    root = layout.cache_root(cache_dir)
    root.mkdir(parents=True, exist_ok=True)
    stamp = time.time() - age.total_seconds()
    path = root / layout.artifact_name(layout.artifact_prefix(uri), int(stamp * 1000))
    path.write_bytes(content)
    os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def make_artifact(cache_dir: Path):
    """Factory fixture around ``write_artifact`` bound to the test cache dir."""

    def _make(uri: str, content: bytes, age: timedelta = timedelta(0)) -> Path:
        return write_artifact(cache_dir, uri, content, age)

    return _make
