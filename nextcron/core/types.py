"""
nextcron shared types — results, statistics and verbosity levels.

All types are dataclasses. Job definitions live in nextcron.scheduler.job.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import IntEnum


class Verbosity(IntEnum):
    """How much the runner logs. Each level includes everything below it."""

    QUIET = 0      # errors only
    BASIC = 1      # progress: executing, success/failure, scheduled, stopped
    EXTENDED = 2   # response bodies, exception name/message/stack

    @classmethod
    def coerce(cls, value: int | Verbosity | None) -> Verbosity:
        """Clamp any int (or None) into a valid level."""
        if value is None:
            return cls.QUIET
        return cls(max(cls.QUIET, min(int(value), cls.EXTENDED)))


@dataclass(slots=True)
class DispatchResult:
    """Outcome of one HTTP call for one job."""

    path: str
    schedule: str
    success: bool
    timestamp: datetime
    duration: int                  # milliseconds
    status_code: int | None = None  # absent when the call itself failed
    error: str | None = None        # only set for transport-level failures


@dataclass(slots=True)
class RunnerStats:
    """Counters accumulated over the lifetime of one runner."""

    total_jobs: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    last_execution: datetime | None = None

    def copy(self) -> RunnerStats:
        return replace(self)
