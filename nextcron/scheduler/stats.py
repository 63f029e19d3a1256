"""
StatsAggregator — run counters for one CronRunner.

All mutation happens on the event loop thread between awaits, so each
record() is atomic with respect to other dispatches.
"""

from __future__ import annotations

from datetime import datetime

from nextcron.core.types import RunnerStats


class StatsAggregator:
    def __init__(self) -> None:
        self._stats = RunnerStats()

    def set_total_jobs(self, count: int) -> None:
        self._stats.total_jobs = count

    def record(self, success: bool, timestamp: datetime) -> None:
        """Count one dispatch."""
        if success:
            self._stats.successful_executions += 1
        else:
            self._stats.failed_executions += 1
        self._stats.last_execution = timestamp

    def snapshot(self) -> RunnerStats:
        """Return a copy; later dispatches do not change it."""
        return self._stats.copy()
