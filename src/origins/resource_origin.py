# src/origins/resource_origin.py - v1
"""Origin for resources bundled inside an importable package.

Endpoints look like ``resource:mypackage.data/defaults/hello.txt``: the first
path segment names the package, the rest is the resource path inside it.
"""

from __future__ import annotations

import importlib.resources
from urllib.parse import unquote, urlsplit

from datareplicator.core.errors import OriginError
from datareplicator.core.payload import Payload
from datareplicator.origins.base_origin import BaseOrigin


class ResourceOrigin(BaseOrigin):
    """Load a bundled package resource."""

    def load(self) -> Payload:
        package, name = self._split()
        try:
            resource = importlib.resources.files(package).joinpath(name)
        except (ModuleNotFoundError, TypeError) as e:
            raise OriginError(f"package {package!r} not found for {self.endpoint}") from e

        if not resource.is_file():
            raise OriginError(f"resource {name!r} not found in package {package!r}")
        try:
            return Payload(resource.read_bytes())
        except OSError as e:
            raise OriginError(f"reading resource {self.endpoint} failed: {e}") from e

    def _split(self) -> tuple[str, str]:
        parts = urlsplit(self.endpoint.uri)
        address = unquote(f"{parts.netloc}{parts.path}").lstrip("/")
        package, _, name = address.partition("/")
        if not package or not name:
            raise OriginError(
                f"{self.endpoint} must look like resource:<package>/<path>"
            )
        return package, name
