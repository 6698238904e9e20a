"""
Data model for the pattern a watch currently displays.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..logic.time_pattern import TimePattern

# Fixed probe used to detect whether a pattern shows seconds.
PROBE_TIME = datetime(1970, 1, 1, 1, 2, 3, tzinfo=timezone.utc)
SECONDS_TOKEN = "03"


@dataclass(frozen=True)
class DisplayFormat:
    """
    A compiled display pattern plus its derived properties.

    Attributes:
        pattern (str): Pattern text, e.g. "h:mm:ss a".
        locale (str): Locale tag the pattern renders with.
        includes_seconds (bool): True if rendering the probe time 01:02:03
            contains "03". A string probe, so unusual literals can fool it.
    """
    pattern: str
    locale: str = "en_US"
    compiled: TimePattern = field(init=False, repr=False, compare=False)
    includes_seconds: bool = field(init=False)

    def __post_init__(self) -> None:
        compiled = TimePattern(self.pattern, self.locale)
        object.__setattr__(self, "compiled", compiled)
        object.__setattr__(self, "includes_seconds", SECONDS_TOKEN in compiled.format(PROBE_TIME))

    def with_locale(self, locale: str) -> "DisplayFormat":
        if locale == self.locale:
            return self
        return DisplayFormat(self.pattern, locale)

    def format(self, dt: datetime) -> str:
        return self.compiled.format(dt)
