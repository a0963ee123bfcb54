# src/cache/layout.py - v1
"""Cache directory structure and artifact naming.

Artifacts live in ``{cache_dir}/datareplicator/`` and are named
``{urlsafe-base64(endpoint)}_{epoch-millis}.cache``. In-flight writes use
``{uuid4}.temp`` in the same directory so the final rename stays on one
filesystem.
"""

from __future__ import annotations

import base64
import uuid
from pathlib import Path

CACHE_SUBDIR = "datareplicator"
CACHE_SUFFIX = ".cache"
TEMP_SUFFIX = ".temp"


def cache_root(cache_dir: Path) -> Path:
    """Return the replicator subdirectory of a cache directory."""
    return cache_dir / CACHE_SUBDIR


def artifact_prefix(name: str) -> str:
    """Filesystem-safe prefix shared by all artifacts of ``name``."""
    return base64.urlsafe_b64encode(name.encode("utf-8")).decode("ascii") + "_"


def artifact_name(prefix: str, timestamp_ms: int) -> str:
    return f"{prefix}{timestamp_ms}{CACHE_SUFFIX}"


def temp_name() -> str:
    return f"{uuid.uuid4()}{TEMP_SUFFIX}"


def parse_timestamp(filename: str, prefix: str) -> int:
    """Return the epoch-millis embedded in an artifact name.

    Raises:
        ValueError: ``filename`` is not an artifact of ``prefix``.
    """
    if not filename.startswith(prefix) or not filename.endswith(CACHE_SUFFIX):
        raise ValueError(f"{filename!r} is not a cache artifact of {prefix!r}")
    stamp = filename[len(prefix) : -len(CACHE_SUFFIX)]
    if not stamp.isdigit():
        raise ValueError(f"{filename!r} has no valid timestamp")
    return int(stamp)
