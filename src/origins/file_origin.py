# src/origins/file_origin.py - v1
"""Origin for files on the local filesystem (``file:`` URIs)."""

from __future__ import annotations

from pathlib import Path

from datareplicator.core.errors import OriginError
from datareplicator.core.payload import Payload
from datareplicator.origins.base_origin import BaseOrigin


class FileOrigin(BaseOrigin):
    """Load a local file."""

    @property
    def file_path(self) -> Path:
        return Path(self.endpoint.path)

    def load(self) -> Payload:
        path = self.file_path
        if not path.is_file():
            raise OriginError(f"file {path.absolute()} not found")
        try:
            return Payload(path.read_bytes())
        except OSError as e:
            raise OriginError(f"reading file {path.absolute()} failed: {e}") from e
