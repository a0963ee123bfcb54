# src/job/job_factory.py - v1
"""Factory: start a replication job for a text or binary consumer."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx

from datareplicator.config.settings import Settings
from datareplicator.core.models import Endpoint
from datareplicator.core.payload import Payload
from datareplicator.job.replication_job import ReplicationJob


def start_consuming_text(
    endpoint: str | Path | Endpoint,
    consumer: Callable[[str], None],
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> ReplicationJob:
    """Start replicating ``endpoint``, delivering decoded text.

    Text is decoded with the charset declared by the origin (HTTP
    ``Content-Type``) or, failing that, with the heuristic guesser.

    Raises:
        ConfigurationError: Unsupported scheme or invalid endpoint.
        ReplicationError: Startup failed and no cached copy could stand in.
    """

    def deliver(payload: Payload) -> None:
        consumer(payload.as_text())

    return ReplicationJob(endpoint, deliver, settings=settings, client=client)


def start_consuming_binary(
    endpoint: str | Path | Endpoint,
    consumer: Callable[[bytes], None],
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> ReplicationJob:
    """Start replicating ``endpoint``, delivering raw bytes."""

    def deliver(payload: Payload) -> None:
        consumer(payload.as_binary())

    return ReplicationJob(endpoint, deliver, settings=settings, client=client)
