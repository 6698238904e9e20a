"""Tests for core.helpers.date_time_helper."""
from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from core.helpers import date_time_helper as dt


@pytest.mark.parametrize(
    ("now_ms", "interval_ms", "expected"),
    [(0, 1000, 1000), (999, 1000, 1000), (1000, 1000, 2000), (12_345, 1000, 13_000), (10, 250, 250)],
)
def test_next_second_boundary(now_ms: int, interval_ms: int, expected: int) -> None:
    assert dt.next_second_boundary(now_ms, interval_ms) == expected


def test_resolve_zone() -> None:
    tz = dt.resolve_zone("Asia/Tokyo")
    assert datetime(2024, 1, 1, tzinfo=tz).utcoffset() == timedelta(hours=9)


@pytest.mark.parametrize("zone_id", ["Mars/Olympus_Mons", "", "../etc/passwd"])
def test_resolve_zone_rejects_unknown(zone_id: str) -> None:
    with pytest.raises(LookupError):
        dt.resolve_zone(zone_id)


def test_uptime_is_monotonic() -> None:
    first = dt.uptime_ms()
    assert dt.uptime_ms() >= first
