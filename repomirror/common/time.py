"""Common time utilities.

Timestamps are always timezone-aware UTC. "Never happened" is represented by
:data:`ZERO_TIME`, which msgspec serialises as ``0001-01-01T00:00:00Z``.
"""

from __future__ import annotations

import datetime as dt

ZERO_TIME = dt.datetime(1, 1, 1, tzinfo=dt.UTC)


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def is_zero(value: dt.datetime) -> bool:
    """Return True when ``value`` is the zero instant."""
    return ensure_utc(value) == ZERO_TIME


def ensure_utc(value: dt.datetime) -> dt.datetime:
    """Return ``value`` converted to UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC)
