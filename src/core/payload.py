# src/core/payload.py - v1
"""Immutable fetched-or-cached version of a resource."""

from __future__ import annotations

import codecs
import hashlib
from dataclasses import dataclass, field
from functools import cached_property

from datareplicator.core.encodings import guess_encoding


def compute_fingerprint(data: bytes) -> int:
    """64-bit change-detection hash: the first 8 bytes of the MD5 digest."""
    digest = hashlib.md5(data).digest()  # noqa: S324
    return int.from_bytes(digest[:8], "little", signed=True)


@dataclass(frozen=True)
class Payload:
    """Raw bytes plus fingerprint, with lazy text decoding.

    ``charset`` is the known encoding of ``data``. When it is None the text
    form is decoded with the heuristic guesser.
    """

    data: bytes
    charset: str | None = None
    fingerprint: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fingerprint", compute_fingerprint(self.data))

    @classmethod
    def from_declared_charset(cls, data: bytes, charset: str | None) -> Payload:
        """Build a payload from bytes whose charset came from transport metadata.

        Bytes with a declared charset are transcoded to UTF-8 up front, so the
        payload stays decodable once persisted without the metadata. Bytes
        that are malformed in the declared charset become U+FFFD.

        Raises:
            LookupError: Unknown charset name.
        """
        if not charset:
            return cls(data)
        codecs.lookup(charset)
        return cls(data.decode(charset, errors="replace").encode("utf-8"), charset="utf-8")

    @cached_property
    def encoding(self) -> str:
        """Encoding used by ``as_text``."""
        return self.charset or guess_encoding(self.data)

    def as_binary(self) -> bytes:
        return self.data

    def as_text(self) -> str:
        return self.text

    @cached_property
    def text(self) -> str:
        return self.data.decode(self.encoding, errors="replace")
