"""Wall-clock aligned recurring trigger."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class IntervalScheduler:
    """Fires ``job`` at every multiple of ``interval_seconds`` on the clock.

    With a 600 s interval the job runs at :00, :10, :20 ... of every hour,
    like the cron expression ``*/10 * * * *``.

    Each tick starts the job as its own task. A slow job does not delay the
    next tick and overlapping runs are allowed. Ticks missed while the loop
    was blocked are skipped, not replayed. Exceptions raised by the job are
    logged and do not stop the scheduler.
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[Any]],
        interval_seconds: float = 600.0,
        run_on_start: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._job = job
        self._interval = interval_seconds
        self._run_on_start = run_on_start
        self._clock = clock
        self._stop_event = asyncio.Event()
        self._in_flight: set[asyncio.Task] = set()
        self.ticks = 0

    @property
    def running_jobs(self) -> int:
        return len(self._in_flight)

    def next_fire_time(self, now: float) -> float:
        """First interval boundary strictly after ``now``."""
        return (math.floor(now / self._interval) + 1) * self._interval

    def stop(self) -> None:
        self._stop_event.set()

    async def run_forever(self) -> None:
        """Tick until ``stop()`` is called, then wait for in-flight jobs."""
        logger.info("Scheduler started, interval %.0fs", self._interval)
        if self._run_on_start:
            self._spawn()
        target = self.next_fire_time(self._clock())
        try:
            while not self._stop_event.is_set():
                delay = target - self._clock()
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=max(delay, 0))
                except asyncio.TimeoutError:
                    self._spawn()
                    # An early wake-up must not fire the same boundary twice
                    target = self.next_fire_time(max(self._clock(), target))
        finally:
            if self._in_flight:
                logger.info("Waiting for %d running job(s)", len(self._in_flight))
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            logger.info("Scheduler stopped after %d tick(s)", self.ticks)

    def _spawn(self) -> None:
        self.ticks += 1
        task = asyncio.create_task(self._run_job(self.ticks))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run_job(self, tick: int) -> None:
        try:
            await self._job()
        except Exception:
            logger.exception("Scheduled job failed (tick %d)", tick)
