"""
date_time_helpers.py

Helper functions for time zone resolution and the millisecond arithmetic used
by the watchface ticker.

All features and modules should use ONLY these helpers for date/time logic.
"""

from __future__ import annotations

import time
from datetime import tzinfo

try:
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError  # Python 3.9+
except ImportError:
    raise ImportError("Python 3.9+ with zoneinfo is required for timezone support.")

MILLIS_PER_SECOND = 1000


def resolve_zone(zone_id: str) -> tzinfo:
    """
    Returns the tzinfo for an IANA zone id (e.g. "Europe/Berlin").

    :raises LookupError: if the id is unknown or malformed
    """
    try:
        return ZoneInfo(zone_id)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise LookupError(zone_id) from exc


def uptime_ms() -> int:
    """Monotonic clock in milliseconds. Unaffected by wall-clock changes."""
    return time.monotonic_ns() // 1_000_000


def next_second_boundary(now_ms: int, interval_ms: int = MILLIS_PER_SECOND) -> int:
    """
    Returns the next multiple of *interval_ms* strictly after *now_ms*.

    >>> next_second_boundary(12_345)
    13000
    >>> next_second_boundary(13_000)
    14000
    """
    return now_ms + (interval_ms - now_ms % interval_ms)
