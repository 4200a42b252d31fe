"""Periodic timers on the asyncio event loop - Imperative Shell."""

import asyncio
import inspect
import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)


# Plain function or coroutine function
TimerCallback = Callable[[], Any]


class AsyncioTimer:
    """A repeating timer driven by loop.call_later.

    Coroutine callbacks are scheduled as tasks so a slow callback never
    delays the next tick.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: TimerCallback,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.loop = loop
        self.fire_count = 0
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def active(self) -> bool:
        return not self._cancelled

    def start(self) -> None:
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self.loop.call_later(self.interval_seconds, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return

        self.fire_count += 1
        logger.debug("Timer fired (%d)", self.fire_count)

        result = self.callback()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

        self._schedule()

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Timer callback failed: %s", error, exc_info=error)

    def cancel(self) -> None:
        """Stop the timer. Callbacks already running are not interrupted."""
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioTimerFactory:
    """Creates repeating timers on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop

    def start(self, interval_seconds: float, callback: TimerCallback) -> AsyncioTimer:
        """Start a repeating timer.

        Args:
            interval_seconds: Period between ticks
            callback: Plain function or coroutine function to call on each tick

        Returns:
            Timer handle; call cancel() to stop it
        """
        loop = self.loop or asyncio.get_running_loop()
        timer = AsyncioTimer(interval_seconds, callback, loop)
        timer.start()
        logger.info("Started refresh timer every %ss", interval_seconds)
        return timer
