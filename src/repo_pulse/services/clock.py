"""Once-per-second clock for the home screen."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from repo_pulse.config import DEFAULT_CLOCK_FORMAT

logger = logging.getLogger(__name__)


class ClockTicker:
    """Keeps a formatted timestamp up to date on the running event loop.

    ``current()`` can be polled at any time; ``on_tick`` is called with every
    new value. At most one schedule is active: calling ``start()`` again
    re-arms the ticker instead of adding a second one.
    """

    def __init__(
        self,
        interval: float = 1.0,
        fmt: str = DEFAULT_CLOCK_FORMAT,
        now: Callable[[], datetime] = datetime.now,
        on_tick: Optional[Callable[[str], None]] = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.fmt = fmt
        self.on_tick = on_tick
        self._now = now
        self._current = ""
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def current(self) -> str:
        """The latest formatted timestamp, or "" when stopped."""
        return self._current

    def start(self) -> None:
        """Update immediately, then every ``interval`` seconds until stop().

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        self._cancel()
        self._tick()
        self._task = loop.create_task(self._run(loop))
        logger.debug("Clock started (interval=%.2fs)", self.interval)

    def stop(self) -> None:
        """Cancel the schedule and clear the current value. Safe if not running."""
        if self._cancel():
            logger.debug("Clock stopped")
        self._current = ""

    def _cancel(self) -> bool:
        if self._task is None:
            return False
        self._task.cancel()
        self._task = None
        return True

    async def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        # Deadlines are absolute so a slow tick does not shift the next one
        deadline = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            self._tick()
            deadline += self.interval
            if deadline < loop.time():
                # Fell behind (e.g. a blocked loop); skip missed ticks
                deadline = loop.time() + self.interval

    def _tick(self) -> None:
        self._current = self._now().strftime(self.fmt)
        if self.on_tick is None:
            return
        try:
            self.on_tick(self._current)
        except Exception:
            logger.exception("Clock tick callback failed")
