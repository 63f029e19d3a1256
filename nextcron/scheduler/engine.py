"""
CronRunner — runs the cron jobs declared in vercel.json against a live app.

Design:
- Every operation except list_jobs() re-reads the config file first, so
  edits show up on the next call without restarting
- Watch mode (start/stop): one asyncio timer per job; each firing
  dispatches in its own task and never blocks the other timers
- One-shot modes (execute_all/execute_one) dispatch immediately and do
  not touch the timers
- The filter pattern applies to start, execute_all and list_jobs, but not
  to execute_one, which looks the path up in the full job list
- Stats are never reset; only start() sets total_jobs

Usage:
    async with CronRunner("http://localhost:3000", cron_secret="s3cret") as runner:
        results = await runner.execute_all()
        print(runner.get_stats())
"""

from __future__ import annotations

import logging
import os

import httpx

from nextcron.core.config import DEFAULT_CONFIG_PATH, SECRET_ENV_VAR, RunnerConfig
from nextcron.core.errors import (
    InvalidBaseUrlError,
    InvalidScheduleError,
    JobNotFoundError,
    NoMatchingJobsError,
)
from nextcron.core.log import RunLog
from nextcron.core.types import DispatchResult, RunnerStats, Verbosity
from nextcron.scheduler.dispatcher import Dispatcher
from nextcron.scheduler.filters import PathFilter
from nextcron.scheduler.job import Job, JobConfig
from nextcron.scheduler.stats import StatsAggregator
from nextcron.scheduler.store import ConfigStore
from nextcron.scheduler.timers import TimerRegistry
from nextcron.scheduler.triggers import is_valid_schedule

logger = logging.getLogger(__name__)


class CronRunner:
    """
    Local runner for Vercel-style cron jobs.

    States:
        idle      — no timers (initial, and after stop())
        watching  — start() succeeded; one timer per filtered job

    start() while already watching is a caller error and raises RuntimeError.
    """

    def __init__(
        self,
        base_url: str,
        cron_secret: str | None = None,
        config_path: str | None = None,
        verbose: int | Verbosity = Verbosity.QUIET,
        filter: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        _validate_base_url(base_url)

        self._base_url = base_url
        # Resolved once here; nothing else reads the environment
        self._cron_secret = cron_secret or os.environ.get(SECRET_ENV_VAR, "")
        self._verbosity = Verbosity.coerce(verbose)
        self._log = RunLog(logger, self._verbosity)

        self._store = ConfigStore(config_path or DEFAULT_CONFIG_PATH)
        self._filter = PathFilter(filter)
        self._stats = StatsAggregator()
        self._timers = TimerRegistry()
        self._dispatcher = Dispatcher(
            base_url=base_url,
            cron_secret=self._cron_secret,
            verbosity=self._verbosity,
            stats=self._stats,
            transport=transport,
        )
        self._config: JobConfig | None = None

    @classmethod
    def from_config(
        cls,
        config: RunnerConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CronRunner:
        return cls(
            base_url=config.base_url,
            cron_secret=config.cron_secret or None,
            config_path=config.config_path,
            verbose=config.verbose,
            filter=config.filter,
            transport=transport,
        )

    async def __aenter__(self) -> CronRunner:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ── Properties ───────────────────────────────────────────────────────────

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def verbosity(self) -> Verbosity:
        return self._verbosity

    @property
    def config_path(self) -> str:
        return str(self._store.path)

    @property
    def is_watching(self) -> bool:
        return len(self._timers) > 0

    @property
    def scheduled_paths(self) -> list[str]:
        """Paths that currently have an active timer."""
        return self._timers.paths

    # ── Watch mode ───────────────────────────────────────────────────────────

    async def start(self) -> None:
        """
        Load the config and schedule every filtered job.

        All schedules are validated before any timer is created, so a bad
        schedule leaves the runner idle.

        Raises:
            ConfigError: config file missing, malformed, or bad filter
            NoMatchingJobsError: the filter matched nothing
            InvalidScheduleError: a job's schedule is not valid 5-field cron
        """
        if self.is_watching:
            raise RuntimeError("CronRunner is already started; call stop() first")

        jobs = self._load_filtered_jobs()

        for job in jobs:
            if not is_valid_schedule(job.schedule):
                raise InvalidScheduleError(job.path, job.schedule)

        self._stats.set_total_jobs(len(jobs))
        self._log.info(f"Starting {len(jobs)} cron job(s)...")

        for job in jobs:
            self._timers.register(job, self._make_callback(job))
            self._log.info(f"Scheduled: {job.path} ({job.schedule})")

        self._log.info("All cron jobs started successfully")

    def stop(self) -> int:
        """
        Stop all timers. Returns how many were stopped.

        Safe from any state; stats are untouched and in-flight dispatches
        are allowed to finish.
        """
        self._log.info("Stopping all cron jobs...")
        for path in self._timers.paths:
            self._log.info(f"Stopped: {path}")
        stopped = self._timers.stop_all()
        self._log.info("All cron jobs stopped")
        return stopped

    def _make_callback(self, job: Job):
        async def on_fire() -> None:
            await self._dispatcher.dispatch(job)

        return on_fire

    # ── One-shot execution ───────────────────────────────────────────────────

    async def execute_all(self) -> list[DispatchResult]:
        """
        Dispatch every filtered job once, in config order.

        Raises:
            ConfigError: config file missing or malformed
            NoMatchingJobsError: the filter matched nothing
        """
        jobs = self._load_filtered_jobs()
        self._log.info(f"Executing {len(jobs)} cron job(s) once...")

        results: list[DispatchResult] = []
        for job in jobs:
            results.append(await self._dispatcher.dispatch(job))
        return results

    async def execute_one(self, path: str) -> DispatchResult:
        """
        Dispatch the job with exactly this path, ignoring the filter.

        Raises:
            ConfigError: config file missing or malformed
            JobNotFoundError: no job has this path
        """
        self._config = self._store.load()
        job = self._config.find(path)
        if job is None:
            raise JobNotFoundError(path)
        return await self._dispatcher.dispatch(job)

    # ── Read-only views ──────────────────────────────────────────────────────

    def get_stats(self) -> RunnerStats:
        """Snapshot of the counters."""
        return self._stats.snapshot()

    def list_jobs(self) -> list[Job]:
        """Filtered job list, reusing the last loaded config if there is one."""
        if self._config is None:
            self._config = self._store.load()
        return self._filter.apply(self._config.crons)

    async def aclose(self) -> None:
        """Stop timers and release the HTTP client."""
        self._timers.stop_all()
        await self._dispatcher.aclose()

    # ── Internal ─────────────────────────────────────────────────────────────

    def _load_filtered_jobs(self) -> list[Job]:
        self._config = self._store.load()
        jobs = self._filter.apply(self._config.crons)
        if not jobs:
            raise NoMatchingJobsError(details={"filter": self._filter.pattern})
        return jobs


def _validate_base_url(base_url: str) -> None:
    if not base_url:
        raise InvalidBaseUrlError("baseUrl is required")
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise InvalidBaseUrlError("baseUrl must be a valid URL", details={"reason": str(e)}) from e
    if not url.scheme or not url.host:
        raise InvalidBaseUrlError("baseUrl must be a valid URL", details={"base_url": base_url})
