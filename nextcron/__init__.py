"""
nextcron — Run Next.js Vercel cron jobs locally.

Public API:
    from nextcron import CronRunner, Job, DispatchResult, RunnerStats
"""

__version__ = "0.1.0"

# Core
from nextcron.core.config import RunnerConfig
from nextcron.core.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigShapeError,
    InvalidBaseUrlError,
    InvalidFilterError,
    InvalidScheduleError,
    JobNotFoundError,
    NextCronError,
    NoMatchingJobsError,
    SchedulerError,
)
from nextcron.core.types import DispatchResult, RunnerStats, Verbosity

# Scheduler
from nextcron.scheduler.engine import CronRunner
from nextcron.scheduler.job import Job, JobConfig

__all__ = [
    # Core
    "RunnerConfig",
    "DispatchResult",
    "RunnerStats",
    "Verbosity",
    # Errors
    "NextCronError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigShapeError",
    "InvalidBaseUrlError",
    "InvalidFilterError",
    "SchedulerError",
    "NoMatchingJobsError",
    "InvalidScheduleError",
    "JobNotFoundError",
    # Scheduler
    "CronRunner",
    "Job",
    "JobConfig",
]
