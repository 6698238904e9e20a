"""
Watchface feature package initializer.

Provides a factory the host application calls to bind a time controller to
its watchface without hard-coding internals.

Imports are deferred so that ``core.contracts.watchface`` can import the
feature's models without pulling in the controller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from core.config.config_service import WatchfaceConfig
    from core.contracts.watchface import IClockSource, IWakeScheduler, IWatchface
    from watchface.logic.watch import Watch


def create_watch(
    watchface: "IWatchface",
    clock_source: "IClockSource",
    wake_scheduler: Optional["IWakeScheduler"] = None,
    config: Optional["WatchfaceConfig"] = None,
) -> "Watch":
    """
    Factory for the time controller.

    Args:
        watchface (IWatchface): The Host; held weakly by the controller.
        clock_source (IClockSource): Wall clock and notification streams.
        wake_scheduler (IWakeScheduler, optional): Enables dim-mode wake-ups.
        config (WatchfaceConfig, optional): Overrides the global configuration.

    Returns:
        Watch: A detached controller. Call ``on_attached_to_window()`` to start.
    """
    from watchface.logic.watch import Watch

    return Watch(watchface, clock_source, wake_scheduler, config=config)


__all__ = ["create_watch"]
