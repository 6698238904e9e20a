"""
TkDispatchQueue
---------------
IDispatchQueue on top of a Tk widget's event loop.

- ``post_at_time`` / ``remove_callbacks`` map onto ``after`` / ``after_cancel``
  and must be called from the Tk thread (where the Watch lives).
- ``post`` may be called from any thread: callbacks go through a thread-safe
  inbox that the Tk thread drains every ``poll_ms``.
"""

from __future__ import annotations

import logging
import queue
import tkinter as tk
from typing import Callable, Dict, List

from core.contracts.watchface import IDispatchQueue
from core.helpers import date_time_helper as dt

logger = logging.getLogger(__name__)


class TkDispatchQueue(IDispatchQueue):
    """Dispatch queue bound to the Tk event loop owning *widget*."""

    def __init__(self, widget: tk.Misc, poll_ms: int = 50) -> None:
        self._widget = widget
        self._poll_ms = poll_ms
        self._inbox: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()
        self._after_ids: Dict[Callable[[], None], List[str]] = {}
        self._poll_id: str | None = self._widget.after(self._poll_ms, self._drain)

    # --- IDispatchQueue -----------------------------------------------------

    def post(self, callback: Callable[[], None]) -> None:
        self._inbox.put(callback)

    def post_at_time(self, callback: Callable[[], None], uptime_ms: int) -> None:
        delay = max(0, uptime_ms - self.uptime_ms())
        after_id = ""

        def run() -> None:
            ids = self._after_ids.get(callback)
            if ids is not None and after_id in ids:
                ids.remove(after_id)
                if not ids:
                    del self._after_ids[callback]
            callback()

        after_id = self._widget.after(delay, run)
        self._after_ids.setdefault(callback, []).append(after_id)

    def remove_callbacks(self, callback: Callable[[], None]) -> None:
        for after_id in self._after_ids.pop(callback, []):
            try:
                self._widget.after_cancel(after_id)
            except tk.TclError:
                logger.debug("after id %s already gone", after_id)

    def uptime_ms(self) -> int:
        return dt.uptime_ms()

    # --- Lifecycle ----------------------------------------------------------

    def close(self) -> None:
        """Stops draining the inbox and cancels every pending callback."""
        if self._poll_id is not None:
            try:
                self._widget.after_cancel(self._poll_id)
            except tk.TclError:
                pass
            self._poll_id = None
        for callback in list(self._after_ids):
            self.remove_callbacks(callback)

    # --- Internal helpers ---------------------------------------------------

    def _drain(self) -> None:
        # re-arm first so a failing callback does not stop the queue
        self._poll_id = self._widget.after(self._poll_ms, self._drain)
        while True:
            try:
                callback = self._inbox.get_nowait()
            except queue.Empty:
                break
            callback()
