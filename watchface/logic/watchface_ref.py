"""
WatchfaceRef – non-owning, liveness-checked handle to the Host.

The controller must never keep its Host alive. Every access goes through
``get()``, which returns None once the Host has been collected.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Callable, Optional, TypeVar

if TYPE_CHECKING:
    from core.contracts.watchface import IWatchface

logger = logging.getLogger(__name__)

R = TypeVar("R")


class WatchfaceRef:
    """Weak reference to an IWatchface with a call-if-alive helper."""

    __slots__ = ("_ref", "__weakref__")

    def __init__(self, watchface: "IWatchface") -> None:
        self._ref: weakref.ReferenceType = weakref.ref(watchface)

    def get(self) -> Optional["IWatchface"]:
        return self._ref()

    def call(self, action: Callable[["IWatchface"], R], default: Optional[R] = None) -> Optional[R]:
        """Runs *action* with the live Host, or returns *default* if it is gone."""
        watchface = self.get()
        if watchface is None:
            logger.debug("Watchface is gone, dropping host access")
            return default
        return action(watchface)
