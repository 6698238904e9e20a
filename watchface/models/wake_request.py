"""
Data model for a repeating low-power wake request.
"""

from __future__ import annotations

from dataclasses import dataclass

from .system_notification import NotificationKind


@dataclass(frozen=True, slots=True)
class WakeRequest:
    """
    Identity of a repeating wake-up registered with an IWakeScheduler.

    The same instance is passed to ``set_repeating`` and ``cancel``.

    Attributes:
        start_at_ms (int): Wall-clock epoch milliseconds of the first wake-up.
        interval_ms (int): Repeat interval in milliseconds.
        action (NotificationKind): Broadcast the scheduler emits on each wake-up.
    """
    start_at_ms: int
    interval_ms: int
    action: NotificationKind = NotificationKind.KEEP_ALIVE
