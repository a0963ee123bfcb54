# src/core/encodings.py - v1
"""Heuristic charset guessing by trial decoding.

Deliberately rudimentary: byte-order marks are not inspected and no
statistics are gathered. The first candidate that decodes the whole input
without error wins, so the candidate order is part of the contract. Note that
ISO-8859-15 maps every byte, which makes it the effective catch-all for
anything that is not valid UTF-8. Callers who know the charset should pass it
to ``Payload`` instead.
"""

from __future__ import annotations

DEFAULT_ENCODING = "utf-8"

CANDIDATE_ENCODINGS: tuple[str, ...] = ("utf-8", "iso-8859-15", "windows-1253")


def guess_encoding(data: bytes) -> str:
    """Return the first candidate encoding that strictly decodes ``data``.

    Never raises; falls back to UTF-8 when no candidate fits.
    """
    for encoding in CANDIDATE_ENCODINGS:
        try:
            data.decode(encoding, errors="strict")
        except UnicodeDecodeError:
            continue
        return encoding
    return DEFAULT_ENCODING
