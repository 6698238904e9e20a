"""Watchface feature exceptions."""
from __future__ import annotations

from typing import Optional


class WatchfaceError(Exception):
    """Base exception for the watchface feature."""


class ConfigurationError(WatchfaceError):
    """Raised when the controller or its configuration cannot be set up."""


class FormatParseError(WatchfaceError, ValueError):
    """Raised when a time pattern cannot be compiled."""

    def __init__(self, pattern: str, message: str, position: Optional[int] = None) -> None:
        self.pattern = pattern
        self.position = position
        where = f" at index {position}" if position is not None else ""
        super().__init__(f"Invalid time pattern {pattern!r}{where}: {message}")


class TimeZoneError(WatchfaceError, ValueError):
    """Raised when a time zone id is unknown."""

    def __init__(self, zone_id: str) -> None:
        self.zone_id = zone_id
        super().__init__(f"Unknown time zone {zone_id!r}")
