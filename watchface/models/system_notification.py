"""
watchface/models/system_notification.py

Events delivered by the clock source's notification stream.

One stream carries every system broadcast the controller listens to; the
controller routes them by ``kind``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NotificationKind(str, Enum):
    TIME_TICK = "time_tick"
    TIME_CHANGED = "time_changed"
    TIMEZONE_CHANGED = "timezone_changed"
    KEEP_ALIVE = "keep_alive"            # wake-up only, no time update
    BATTERY_CHANGED = "battery_changed"


@dataclass(frozen=True, slots=True)
class SystemNotification:
    """A single system broadcast."""

    kind: NotificationKind
    battery_level: Optional[int] = None
