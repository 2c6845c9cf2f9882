"""
One-shot refresh timer. Arming replaces any pending timer, so at most one refresh is
scheduled per timer instance. The delay is used as given (no margin or jitter).
Firing starts the callback as a task and does not await or retry it.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[Any]]


class RefreshTimer:
    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def arm(self, delay_seconds: float, callback: RefreshCallback) -> None:
        """Cancel any pending timer, then run callback once after delay_seconds. Needs a running loop."""
        if delay_seconds <= 0:
            raise ValueError("Timer duration must be positive")
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay_seconds, self._fire, callback)
        logger.debug("Refresh timer armed for %ss", delay_seconds)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: RefreshCallback) -> None:
        self._handle = None
        task = asyncio.ensure_future(callback())
        # Hold a reference until done; the loop only keeps weak ones
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Refresh timer callback failed: %s", error)


default_timer = RefreshTimer()


def set_refresh_timer(delay_seconds: float, callback: RefreshCallback) -> None:
    default_timer.arm(delay_seconds, callback)


def clear_refresh_timer() -> None:
    default_timer.cancel()
