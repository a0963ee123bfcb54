# src/origins/http_origin.py - v1
"""HTTP(S) origin with conditional re-fetch.

The last response carrying an ``etag`` is remembered per URI. Subsequent
requests send the token back in an ``etag`` request header; a 304 answer then
reuses the remembered payload instead of transferring the body again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from datareplicator.core.errors import OriginError
from datareplicator.core.models import Endpoint
from datareplicator.core.payload import Payload
from datareplicator.origins.base_origin import BaseOrigin

logger = logging.getLogger(__name__)

ETAG_HEADER = "etag"


@dataclass(frozen=True)
class ConditionalEntry:
    """Validator token and payload of the last successful response for a URI."""

    uri: str
    etag: str
    payload: Payload


class HttpOrigin(BaseOrigin):
    """Fetch a resource with HTTP GET."""

    def __init__(
        self,
        endpoint: Endpoint,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(endpoint)
        self._owns_client = client is None
        self._client = (
            client
            if client is not None
            else httpx.Client(timeout=timeout, follow_redirects=True)
        )
        self._conditional: dict[str, ConditionalEntry] = {}
        self._closed = False

    @property
    def owns_client(self) -> bool:
        return self._owns_client

    def conditional_entry(self, uri: str | None = None) -> ConditionalEntry | None:
        """Remembered entry for ``uri`` (defaults to this origin's endpoint)."""
        return self._conditional.get(uri or self.endpoint.uri)

    def load(self) -> Payload:
        return self._fetch(self.endpoint.uri)

    def _fetch(self, uri: str) -> Payload:
        cached = self._conditional.get(uri)
        headers = {ETAG_HEADER: cached.etag} if cached is not None else {}

        try:
            response = self._client.get(uri, headers=headers)
        except httpx.HTTPError as e:
            raise OriginError(f"requesting {uri} failed: {e}") from e

        status = response.status_code
        if 200 <= status < 300:
            try:
                payload = Payload.from_declared_charset(
                    response.content, response.charset_encoding
                )
            except LookupError as e:
                raise OriginError(
                    f"response of {uri} declares an unsupported charset: {e}",
                    status_code=status,
                ) from e
            etag = response.headers.get(ETAG_HEADER)
            if etag:
                self._conditional[uri] = ConditionalEntry(uri=uri, etag=etag, payload=payload)
            return payload

        if status == 304:
            if cached is None:
                raise OriginError(
                    f"got 304 for non-conditional request {uri}", status_code=status
                )
            logger.debug("%s not modified (etag %s)", uri, cached.etag)
            return cached.payload

        raise OriginError(f"got {status} by calling {uri}", status_code=status)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()
