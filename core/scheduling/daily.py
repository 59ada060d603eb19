"""
Daily recurring job on the asyncio event loop.

A DailyJob wakes up once a day at a fixed wall-clock time, runs its
coroutine, and goes back to sleep. It is owned by the application
lifespan: start() on boot, stop() on shutdown.

- One background task per job, never blocking request handlers
- A failing run is logged; the next day's run still happens
- No catch-up: a run missed while the process was down is skipped
"""
from __future__ import annotations
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, Optional
import asyncio
import logging

logger = logging.getLogger(__name__)


def next_run_after(now: datetime, run_at: time) -> datetime:
    """First occurrence of `run_at` strictly after `now`."""
    candidate = now.replace(
        hour=run_at.hour,
        minute=run_at.minute,
        second=run_at.second,
        microsecond=0,
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class DailyJob:
    """Run an async action every day at `run_at` (local time)."""

    def __init__(
        self,
        name: str,
        run_at: time,
        action: Callable[[], Awaitable[object]],
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.name = name
        self.run_at = run_at
        self.action = action
        self._clock = clock
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def seconds_until_next_run(self) -> float:
        now = self._clock()
        return (next_run_after(now, self.run_at) - now).total_seconds()

    async def run_once(self) -> None:
        """Run the action now. Failures are logged, never raised."""
        self.runs += 1
        try:
            await self.action()
        except Exception:
            logger.exception("Scheduled job %s failed", self.name)

    async def _loop(self) -> None:
        while True:
            delay = self.seconds_until_next_run()
            logger.debug("Job %s sleeping %.0fs", self.name, delay)
            await self._sleep(delay)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"daily-job:{self.name}")
        logger.info("Scheduled job %s daily at %s", self.name, self.run_at.isoformat())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped job %s", self.name)
