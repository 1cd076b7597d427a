from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


# SQLite INTEGER is signed 64-bit
MAX_LIMIT = 2**63 - 1


class KeyFormatError(ValueError):
    """Raised when a write key is not exactly ``name:tag``."""


@dataclass(frozen=True)
class TagRecord:
    id: int
    name: str
    tag: str
    created_at: datetime
    updated_at: datetime


def parse_write_key(key: str) -> tuple[str, str]:
    """
    Split a write key into (name, tag).

    The key must contain exactly one colon and both sides must be non-empty,
    e.g. ``app:v1``. ``app``, ``a:b:c``, ``:v1`` and ``app:`` are rejected.
    """
    parts = (key or "").split(":")
    if len(parts) != 2:
        raise KeyFormatError(f"expected name:tag, got {key!r}")
    name, tag = parts
    if not name or not tag:
        raise KeyFormatError(f"empty name or tag in {key!r}")
    return name, tag


def parse_read_name(key: str) -> str:
    """Name part of a read key; anything from the first colon on is dropped."""
    return (key or "").split(":", 1)[0]


def parse_limit(raw: str | None) -> int | None:
    """
    Parse the ``limit`` query value.

    Returns None (unbounded) when the value is absent, not an integer, not
    positive, or too large for a SQLite integer. Otherwise the integer.
    """
    if raw is None:
        return None
    try:
        n = int(raw.strip())
    except ValueError:
        return None
    if n <= 0 or n > MAX_LIMIT:
        return None
    return n
