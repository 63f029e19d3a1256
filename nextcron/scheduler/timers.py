"""
Timer Registry — one asyncio task per scheduled job, keyed by job path.

Each CronTimer sleeps until its trigger's next fire time, spawns the
callback as a separate task and goes back to sleep. A slow or failing
callback never delays the next firing of any timer.

Shutdown:
    registry.stop_all()

cancels every timer loop. Callbacks already in flight are left to finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from nextcron.scheduler.job import Job
from nextcron.scheduler.triggers import CronTrigger

logger = logging.getLogger(__name__)

FireCallback = Callable[[], Awaitable[object]]


class CronTimer:
    """
    A running periodic trigger for a single job.

    Must be started from inside a running event loop.
    """

    def __init__(self, job: Job, on_fire: FireCallback) -> None:
        self.job = job
        self._trigger = CronTrigger(job.schedule)
        self._on_fire = on_fire
        self._task: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self.fire_count = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"cron:{self.job.path}")

    def stop(self) -> None:
        """Stop producing new firings."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _loop(self) -> None:
        next_at = self._trigger.next_fire_time()
        while True:
            await asyncio.sleep(max(next_at - time.time(), 0))
            self._fire()
            # Never before the slot just fired, even if sleep woke early
            next_at = self._trigger.next_fire_time(max(time.time(), next_at))

    def _fire(self) -> None:
        self.fire_count += 1
        task = asyncio.create_task(self._run_callback())
        # Hold a reference until done; the loop never awaits it
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run_callback(self) -> None:
        try:
            await self._on_fire()
        except Exception as e:
            logger.warning(f"Timer callback for {self.job.path} failed (non-fatal): {e}")


class TimerRegistry:
    """
    Owns the active timers of a runner.

    Usage::

        registry = TimerRegistry()
        registry.register(job, lambda: dispatcher.dispatch(job))
        ...
        stopped = registry.stop_all()
    """

    def __init__(self) -> None:
        self._timers: dict[str, CronTimer] = {}

    def register(self, job: Job, on_fire: FireCallback) -> CronTimer:
        """Create and start a timer for ``job``; replaces any timer on the same path."""
        existing = self._timers.pop(job.path, None)
        if existing is not None:
            logger.warning(f"Timer for {job.path} already registered — replacing")
            existing.stop()

        timer = CronTimer(job, on_fire)
        timer.start()
        self._timers[job.path] = timer
        return timer

    def get(self, path: str) -> CronTimer | None:
        return self._timers.get(path)

    @property
    def paths(self) -> list[str]:
        return list(self._timers.keys())

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, path: object) -> bool:
        return path in self._timers

    def stop_all(self) -> int:
        """
        Stop every timer and clear the registry.

        Returns the number of timers stopped. Safe to call multiple times.
        """
        timers = list(self._timers.items())
        for path, timer in timers:
            timer.stop()
            logger.debug(f"Timer stopped: {path}")
        self._timers.clear()
        return len(timers)
