"""Stored form of counter totals: ASCII decimal bytes, e.g. b"42"."""
from __future__ import annotations

from .errors import CorruptionError


def encode_total(total: int) -> bytes:
    if total < 0:
        raise ValueError("counter totals are non-negative")
    return str(total).encode("ascii")


def decode_total(raw, app: str | None = None, ctype: str | None = None) -> int:
    """Decode a stored total, raising CorruptionError for anything but digits.

    Empty values, signs, whitespace and non-ASCII digits are all rejected.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8", "surrogateescape")
    if not isinstance(raw, (bytes, bytearray)) or not raw or not raw.isdigit():
        raise CorruptionError(raw, app=app, ctype=ctype)
    try:
        return int(raw)
    except ValueError as e:
        # digit strings beyond the interpreter's int conversion limit
        raise CorruptionError(raw, app=app, ctype=ctype) from e
