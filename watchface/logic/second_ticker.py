"""
SecondTicker – self-correcting tick loop aligned to whole seconds.

Instead of a fixed-period timer, each firing computes the next second boundary
on the dispatch queue's monotonic clock and re-posts itself for exactly that
instant. Dispatch latency and drift therefore never accumulate.

Every scheduled firing carries the generation it was armed in. ``cancel()``
bumps the generation, so a firing that was already queued (or is handed to
us late by the queue) returns without touching anything.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from core.helpers.date_time_helper import MILLIS_PER_SECOND, next_second_boundary

if TYPE_CHECKING:
    from core.contracts.watchface import IDispatchQueue

logger = logging.getLogger(__name__)


class SecondTicker:
    """
    Runs *action* now and then on every *interval_ms* boundary until cancelled.

    Args:
        action: Work to run on each tick.
        queue_provider: Returns the dispatch queue, or None when the Host is gone.
        keep_running: Checked before each re-arm; False stops the loop.
        interval_ms: Boundary spacing, 1000 for per-second ticks.
    """

    def __init__(
        self,
        action: Callable[[], None],
        queue_provider: Callable[[], Optional["IDispatchQueue"]],
        *,
        keep_running: Callable[[], bool] = lambda: True,
        interval_ms: int = MILLIS_PER_SECOND,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._action = action
        self._queue_provider = queue_provider
        self._keep_running = keep_running
        self._interval_ms = interval_ms
        self._generation = 0
        self._pending: Optional[Callable[[], None]] = None
        self._next_tick_ms: Optional[int] = None

    # --- Public API ---------------------------------------------------------

    @property
    def is_scheduled(self) -> bool:
        return self._pending is not None

    @property
    def next_tick_ms(self) -> Optional[int]:
        """Uptime (ms) of the pending firing, None if nothing is scheduled."""
        return self._next_tick_ms if self._pending is not None else None

    def run(self) -> None:
        """Tick immediately and arm the next boundary. Replaces any pending tick."""
        self._drop_pending()
        self._generation += 1
        self._fire(self._generation)

    def cancel(self) -> None:
        """Stop ticking. No firing armed before this call will run the action."""
        self._generation += 1
        if self._drop_pending():
            logger.debug("Ticker cancelled")

    # --- Tick loop ----------------------------------------------------------

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._pending = None
        try:
            self._action()
        finally:
            # re-arm even if the action raised
            self._arm(generation)

    def _arm(self, generation: int) -> None:
        # the action may have cancelled or restarted the ticker
        if generation != self._generation or not self._keep_running():
            return

        queue = self._queue_provider()
        if queue is None:
            return

        nxt = next_second_boundary(queue.uptime_ms(), self._interval_ms)
        callback = lambda: self._fire(generation)  # noqa: E731
        self._pending = callback
        self._next_tick_ms = nxt
        queue.post_at_time(callback, nxt)

    def _drop_pending(self) -> bool:
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        queue = self._queue_provider()
        if queue is not None:
            queue.remove_callbacks(pending)
        return True
