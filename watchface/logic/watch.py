"""
Watch – lifecycle-bound time controller for a watchface.

Keeps a Host (IWatchface) supplied with the current time and battery level
while waking up as rarely as possible:

- ticks every second only while the active pattern shows seconds,
  otherwise relies on the system's time-tick notifications
- re-selects the 12h/24h pattern when the system settings change
- optionally asks a low-power scheduler to keep the process awake every
  second while the Host is dimmed

All state changes happen on the Host's dispatch queue. Notifications from the
clock source may arrive on any thread and are re-posted onto that queue first.
The Host is held weakly; once it is gone every operation quietly does nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from core.config.config_service import WatchfaceConfig, get_config_service
from core.helpers.date_time_helper import resolve_zone

from ..exceptions.errors import ConfigurationError, TimeZoneError
from ..models.attachment_state import AttachmentState
from ..models.display_format import DisplayFormat
from ..models.host_environment import HostEnvironment
from ..models.system_notification import NotificationKind, SystemNotification
from ..models.wake_request import WakeRequest
from .second_ticker import SecondTicker
from .watchface_ref import WatchfaceRef

if TYPE_CHECKING:
    from core.contracts.watchface import (
        IClockSource,
        IDispatchQueue,
        IWakeScheduler,
        IWatchface,
    )

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def _default_format(pattern: str, locale: str) -> DisplayFormat:
    return DisplayFormat(pattern, locale)


def _first_non_null(*items: Optional[DisplayFormat]) -> Optional[DisplayFormat]:
    for item in items:
        if item is not None:
            return item
    return None


class Watch:
    """
    Time controller bound to exactly one Host.

    Args:
        watchface: The Host. Held by weak reference only.
        clock_source: Wall clock and notification streams.
        wake_scheduler: Low-power scheduler; None disables dim-mode wake-ups.
        config: Defaults and intervals; the global config service if omitted.

    Raises:
        ConfigurationError: if *watchface* or *clock_source* is None.
    """

    def __init__(
        self,
        watchface: Optional["IWatchface"],
        clock_source: Optional["IClockSource"],
        wake_scheduler: Optional["IWakeScheduler"] = None,
        *,
        config: Optional[WatchfaceConfig] = None,
    ) -> None:
        if watchface is None:
            raise ConfigurationError("Watchface can not be None")
        if clock_source is None:
            raise ConfigurationError("Clock source can not be None")

        self._watchface_ref = WatchfaceRef(watchface)
        self._clock_source = clock_source
        self._wake_scheduler = wake_scheduler
        self._config = config if config is not None else get_config_service().watchface

        # Format state
        self._format_12: Optional[DisplayFormat] = None
        self._format_24: Optional[DisplayFormat] = None
        self._format: DisplayFormat = _default_format(
            self._config.format.default_12_hour, self._config.format.locale
        )
        self._has_seconds = False

        # Time zone override
        self._time_zone: Optional[str] = None
        self._tz: Optional[tzinfo] = None

        # Lifecycle
        self._state = AttachmentState.DETACHED
        self._session = 0
        self._notification_token: Any = None
        self._settings_token: Any = None
        self._wake_request: Optional[WakeRequest] = None

        self._ticker = SecondTicker(
            self._on_time_changed,
            self._dispatch_queue,
            keep_running=lambda: self.is_attached,
            interval_ms=self._config.ticker.tick_interval_ms,
        )
        self._notification_handlers: Dict[NotificationKind, Callable[[SystemNotification], None]] = {
            NotificationKind.TIME_TICK: self._on_time_notification,
            NotificationKind.TIME_CHANGED: self._on_time_notification,
            NotificationKind.TIMEZONE_CHANGED: self._on_time_notification,
            NotificationKind.KEEP_ALIVE: self._on_keep_alive,
            NotificationKind.BATTERY_CHANGED: self._on_battery_notification,
        }

        # Wait until on_attached_to_window() to handle the ticker
        self._choose_format(handle_ticker=False)

    # --- Lifecycle ----------------------------------------------------------

    @property
    def state(self) -> AttachmentState:
        return self._state

    @property
    def is_attached(self) -> bool:
        return self._state is AttachmentState.ATTACHED

    def on_attached_to_window(self) -> None:
        """Subscribe, request wake-ups if wanted, and start showing the time."""
        if self.is_attached:
            return

        self._state = AttachmentState.ATTACHED
        self._session += 1
        session = self._session
        logger.debug("Watch attached (session %d)", session)

        self._register_receivers(session)
        self._register_observer(session)
        self._schedule_wake_request()

        self._choose_format(handle_ticker=False)
        if self._has_seconds:
            self._ticker.run()
        else:
            self._on_time_changed()

    def on_detached_from_window(self) -> None:
        """
        Undo everything attach may have set up. After this returns no tick or
        notification reaches the Host, including ones already queued.

        Every step runs even if an earlier one fails; the first failure is
        re-raised once the watch is detached.
        """
        if not self.is_attached:
            return

        self._session += 1
        errors: List[BaseException] = []
        for step in (
            self._unregister_receivers,
            self._unregister_observer,
            self._cancel_wake_request,
            self._ticker.cancel,
        ):
            try:
                step()
            except Exception as exc:
                logger.warning("Detach step %s failed: %s", step.__name__, exc)
                errors.append(exc)

        self._state = AttachmentState.DETACHED
        logger.debug("Watch detached")
        if errors:
            raise errors[0]

    attach = on_attached_to_window
    detach = on_detached_from_window

    # --- Formats ------------------------------------------------------------

    def get_format_12_hour(self) -> Optional[str]:
        """The user-supplied 12-hour pattern, or None when the default applies."""
        return self._format_12.pattern if self._format_12 is not None else None

    def set_format_12_hour(self, pattern: Optional[str]) -> None:
        """
        Sets the pattern used in 12-hour mode. None clears it, in which case the
        24-hour pattern (if set) or the built-in 12-hour default is used.

        Raises:
            FormatParseError: if *pattern* is not a valid time pattern.
        """
        self._format_12 = self._compile(pattern)
        self._choose_format()
        self._on_time_changed()

    def get_format_24_hour(self) -> Optional[str]:
        """The user-supplied 24-hour pattern, or None when the default applies."""
        return self._format_24.pattern if self._format_24 is not None else None

    def set_format_24_hour(self, pattern: Optional[str]) -> None:
        """
        Sets the pattern used in 24-hour mode. None clears it, in which case the
        12-hour pattern (if set) or the built-in 24-hour default is used.

        Raises:
            FormatParseError: if *pattern* is not a valid time pattern.
        """
        self._format_24 = self._compile(pattern)
        self._choose_format()
        self._on_time_changed()

    def get_format(self) -> DisplayFormat:
        """The active format. Always set once the constructor has finished."""
        return self._format

    @property
    def has_seconds(self) -> bool:
        return self._has_seconds

    def is_24_hour_mode_enabled(self) -> bool:
        env = self._environment()
        return env is not None and env.use_24_hour

    # --- Time ---------------------------------------------------------------

    def get_time_zone(self) -> Optional[str]:
        """The overriding zone id, or None when the system zone is used."""
        return self._time_zone

    def set_time_zone(self, zone_id: Optional[str]) -> None:
        """
        Pins all time computations to *zone_id*; None returns to the system
        zone. Does not change the format.

        Raises:
            TimeZoneError: if *zone_id* is unknown.
        """
        if zone_id is None:
            tz = None
        else:
            try:
                tz = resolve_zone(zone_id)
            except LookupError as exc:
                raise TimeZoneError(zone_id) from exc

        self._time_zone = zone_id
        self._tz = tz
        self._on_time_changed()

    def get_time(self) -> datetime:
        """Now, in the overriding zone if set, else in the system zone."""
        return self._clock_source.now(self._tz)

    def get_formatted_time(self, time: Optional[datetime] = None) -> str:
        """Renders *time* (default: now) with the active format."""
        return self._format.format(time if time is not None else self.get_time())

    # --- Format selection ---------------------------------------------------

    def _compile(self, pattern: Optional[str]) -> Optional[DisplayFormat]:
        if pattern is None:
            return None
        return DisplayFormat(str(pattern), self._locale())

    def _choose_format(self, handle_ticker: bool = True) -> None:
        """
        Selects the 12h or 24h pattern according to the system policy.

        Args:
            handle_ticker: start/stop the ticker when the seconds field
                appears/disappears while attached.
        """
        locale = self._locale()
        fmt = self._config.format
        if self.is_24_hour_mode_enabled():
            chosen = (_first_non_null(self._format_24, self._format_12)
                      or _default_format(fmt.default_24_hour, locale))
        else:
            chosen = (_first_non_null(self._format_12, self._format_24)
                      or _default_format(fmt.default_12_hour, locale))

        had_seconds = self._has_seconds
        self._format = chosen.with_locale(locale)
        self._has_seconds = self._format.includes_seconds

        if had_seconds != self._has_seconds:
            logger.debug("Format %r, seconds %s", self._format.pattern,
                         "on" if self._has_seconds else "off")
            if handle_ticker and self.is_attached:
                if had_seconds:
                    self._ticker.cancel()
                else:
                    self._ticker.run()

    # --- Host access --------------------------------------------------------

    def _environment(self) -> Optional[HostEnvironment]:
        return self._watchface_ref.call(lambda wf: wf.environment())

    def _locale(self) -> str:
        env = self._environment()
        return env.locale if env is not None else self._config.format.locale

    def _dispatch_queue(self) -> Optional["IDispatchQueue"]:
        return self._watchface_ref.call(lambda wf: wf.dispatch_queue())

    def _on_time_changed(self) -> None:
        self._watchface_ref.call(lambda wf: wf.on_time_changed(self.get_time()))

    def _on_battery_level_changed(self, percentage: int) -> None:
        self._watchface_ref.call(lambda wf: wf.on_battery_level_changed(percentage))

    # --- Notifications ------------------------------------------------------

    def _marshal(self, session: int, work: Callable[[], None]) -> None:
        """Runs *work* on the Host's queue if *session* is still current then."""
        queue = self._dispatch_queue()
        if queue is None:
            return

        def run() -> None:
            if session == self._session and self.is_attached:
                work()

        queue.post(run)

    def _on_notification(self, notification: SystemNotification) -> None:
        handler = self._notification_handlers.get(notification.kind)
        if handler is None:
            logger.debug("Ignoring notification %s", notification.kind)
            return
        handler(notification)

    def _on_time_notification(self, notification: SystemNotification) -> None:
        self._on_time_changed()

    def _on_keep_alive(self, notification: SystemNotification) -> None:
        # only keeps the process awake between ticks
        pass

    def _on_battery_notification(self, notification: SystemNotification) -> None:
        level = notification.battery_level
        self._on_battery_level_changed(level if level is not None else 0)

    def _on_settings_changed(self, key: Optional[str] = None) -> None:
        self._choose_format()
        self._on_time_changed()

    # --- Subscriptions ------------------------------------------------------

    def _register_receivers(self, session: int) -> None:
        self._notification_token = self._clock_source.subscribe_notifications(
            lambda n: self._marshal(session, lambda: self._on_notification(n))
        )

    def _register_observer(self, session: int) -> None:
        self._settings_token = self._clock_source.subscribe_settings(
            lambda key=None: self._marshal(session, lambda: self._on_settings_changed(key))
        )

    def _unregister_receivers(self) -> None:
        token, self._notification_token = self._notification_token, None
        if token is not None:
            self._clock_source.unsubscribe_notifications(token)

    def _unregister_observer(self) -> None:
        token, self._settings_token = self._settings_token, None
        if token is not None:
            self._clock_source.unsubscribe_settings(token)

    def _schedule_wake_request(self) -> None:
        if self._wake_scheduler is None:
            return
        wants_wake = self._watchface_ref.call(
            lambda wf: wf.handle_seconds_in_dim_mode() and not wf.is_in_edit_mode(),
            default=False,
        )
        if not wants_wake:
            return

        ticker = self._config.ticker
        request = WakeRequest(
            start_at_ms=self._clock_source.current_time_ms() + ticker.wake_start_delay_ms,
            interval_ms=ticker.wake_interval_ms,
            action=NotificationKind.KEEP_ALIVE,
        )
        self._wake_request = request
        self._wake_scheduler.set_repeating(request)
        logger.debug("Wake request registered: every %d ms", request.interval_ms)

    def _cancel_wake_request(self) -> None:
        request, self._wake_request = self._wake_request, None
        if request is not None and self._wake_scheduler is not None:
            self._wake_scheduler.cancel(request)
