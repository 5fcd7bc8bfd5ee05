"""Scheduling primitives for timed scene playback."""
import asyncio
import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Cancellable handle returned by a scheduler."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """Scheduler backed by the asyncio event loop.

    The loop is looked up when a timer is armed, so one scheduler can be
    created before the server loop is running.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Run callback after delay seconds.

        Args:
            delay: Delay in seconds
            callback: Zero-argument callable

        Returns:
            asyncio.TimerHandle that can be cancelled
        """
        loop = self._loop or asyncio.get_running_loop()
        logger.debug(f"Arming timer for {delay:.3f}s")
        return loop.call_later(delay, callback)
