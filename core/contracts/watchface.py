"""core/contracts/watchface.py
==========================

Contracts between the time controller (``watchface.logic.watch.Watch``) and the
objects it integrates with but does not own:

- IWatchface      : the display surface (Host) that receives time/battery values
- IDispatchQueue  : the Host's single logical thread (tick scheduling, marshaling)
- IClockSource    : wall clock plus system/settings notification streams
- IWakeScheduler  : low-power repeating wake-ups

Implementations live in the host application. Only ``IDispatchQueue`` has an
adapter in this repository (``watchface.adapters.tk_dispatch_queue``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from typing import Any, Callable, Optional

from watchface.models.host_environment import HostEnvironment
from watchface.models.system_notification import SystemNotification
from watchface.models.wake_request import WakeRequest

NotificationCallback = Callable[[SystemNotification], None]
SettingsCallback = Callable[[Optional[str]], None]


class IDispatchQueue(ABC):
    """Serial callback queue with a monotonic millisecond clock."""

    @abstractmethod
    def post(self, callback: Callable[[], None]) -> None:
        """Run *callback* as soon as possible on the queue's thread."""

    @abstractmethod
    def post_at_time(self, callback: Callable[[], None], uptime_ms: int) -> None:
        """Run *callback* once ``uptime_ms()`` has reached *uptime_ms*."""

    @abstractmethod
    def remove_callbacks(self, callback: Callable[[], None]) -> None:
        """Drop every pending run of *callback*. Unknown callbacks are ignored."""

    @abstractmethod
    def uptime_ms(self) -> int:
        """Monotonic clock in milliseconds used by ``post_at_time``."""


class IWatchface(ABC):
    """The Host: a display surface driving one ``Watch`` instance."""

    @abstractmethod
    def on_active_state_changed(self, active: bool) -> None:
        """Host-driven dimming transition. Not called by the controller."""

    @abstractmethod
    def on_time_changed(self, time: datetime) -> None:
        """Display *time* (timezone-aware)."""

    @abstractmethod
    def on_battery_level_changed(self, percentage: int) -> None:
        """Display a new battery level."""

    @abstractmethod
    def handle_seconds_in_dim_mode(self) -> bool:
        """True requests per-second wake-ups while dimmed (costs battery)."""

    @abstractmethod
    def is_in_edit_mode(self) -> bool:
        """True in design-time/preview contexts; suppresses wake requests."""

    @abstractmethod
    def dispatch_queue(self) -> IDispatchQueue:
        """Queue all controller callbacks run on."""

    @abstractmethod
    def environment(self) -> HostEnvironment:
        """Locale and system 24-hour policy."""


class IClockSource(ABC):
    """Wall clock and the system notification streams."""

    @abstractmethod
    def subscribe_notifications(self, callback: NotificationCallback) -> Any:
        """Deliver time-tick/time/timezone/keep-alive/battery events. Returns a token."""

    @abstractmethod
    def unsubscribe_notifications(self, token: Any) -> None:
        """Stop a notification subscription. Unknown tokens are ignored."""

    @abstractmethod
    def subscribe_settings(self, callback: SettingsCallback) -> Any:
        """Deliver system settings changes (key or None). Returns a token."""

    @abstractmethod
    def unsubscribe_settings(self, token: Any) -> None:
        """Stop a settings subscription. Unknown tokens are ignored."""

    @abstractmethod
    def now(self, tz: Optional[tzinfo] = None) -> datetime:
        """Current wall-clock time, aware in *tz* or the system zone."""

    @abstractmethod
    def current_time_ms(self) -> int:
        """Wall-clock epoch milliseconds (used for wake request start times)."""


class IWakeScheduler(ABC):
    """Low-power scheduler for repeating wake-ups."""

    @abstractmethod
    def set_repeating(self, request: WakeRequest) -> None:
        """Register *request*; it fires ``request.action`` every interval."""

    @abstractmethod
    def cancel(self, request: WakeRequest) -> None:
        """Cancel *request* (matched by identity/equality)."""
