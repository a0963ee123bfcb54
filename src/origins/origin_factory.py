# src/origins/origin_factory.py - v1
"""Factory: pick the origin implementation from the endpoint scheme."""

from __future__ import annotations

import httpx

from datareplicator.config.settings import ConfigurationError
from datareplicator.core.models import Endpoint
from datareplicator.origins.base_origin import BaseOrigin

SUPPORTED_SCHEMES = ("resource", "file", "http", "https")


def create_origin(
    endpoint: Endpoint,
    client: httpx.Client | None = None,
    http_timeout: float = 30.0,
) -> BaseOrigin:
    """Instantiate the origin for ``endpoint``.

    Args:
        endpoint: Resource locator.
        client: Externally managed HTTP client (only used by http/https).
        http_timeout: Timeout for a client created by the origin itself.

    Raises:
        ConfigurationError: If the scheme is not supported.
    """
    scheme = endpoint.scheme

    if scheme == "resource":
        from datareplicator.origins.resource_origin import ResourceOrigin
        return ResourceOrigin(endpoint)

    if scheme == "file":
        from datareplicator.origins.file_origin import FileOrigin
        return FileOrigin(endpoint)

    if scheme in ("http", "https"):
        from datareplicator.origins.http_origin import HttpOrigin
        return HttpOrigin(endpoint, client=client, timeout=http_timeout)

    raise ConfigurationError(
        f"scheme of {endpoint} is not supported "
        f"(supported: {', '.join(SUPPORTED_SCHEMES)})"
    )
