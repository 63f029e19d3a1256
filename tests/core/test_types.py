"""Tests for nextcron/core/types.py and the error hierarchy."""

from datetime import datetime

import pytest

from nextcron.core.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    InvalidScheduleError,
    JobNotFoundError,
    NextCronError,
    NoMatchingJobsError,
    SchedulerError,
)
from nextcron.core.types import RunnerStats, Verbosity


class TestVerbosity:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, Verbosity.QUIET),
            (0, Verbosity.QUIET),
            (1, Verbosity.BASIC),
            (2, Verbosity.EXTENDED),
            (5, Verbosity.EXTENDED),
            (-1, Verbosity.QUIET),
        ],
    )
    def test_coerce(self, value, expected):
        assert Verbosity.coerce(value) is expected

    def test_levels_are_ordered(self):
        assert Verbosity.QUIET < Verbosity.BASIC < Verbosity.EXTENDED


class TestRunnerStats:
    def test_defaults(self):
        stats = RunnerStats()
        assert stats.total_jobs == 0
        assert stats.successful_executions == 0
        assert stats.failed_executions == 0
        assert stats.last_execution is None

    def test_copy_is_independent(self):
        stats = RunnerStats(total_jobs=2, successful_executions=1)
        copy = stats.copy()
        stats.successful_executions += 1
        assert copy.successful_executions == 1
        assert copy.total_jobs == 2


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(ConfigNotFoundError, ConfigError)
        assert issubclass(ConfigError, NextCronError)
        assert issubclass(NoMatchingJobsError, SchedulerError)
        assert issubclass(JobNotFoundError, SchedulerError)

    def test_messages(self):
        assert str(ConfigNotFoundError("/x/vercel.json")) == "Config file not found: /x/vercel.json"
        assert "Expecting value" in str(ConfigParseError("/x", "Expecting value"))
        assert str(NoMatchingJobsError()) == "No cron jobs found matching the filter"
        assert str(JobNotFoundError("/nope")) == "Cron job not found: /nope"

    def test_invalid_schedule_names_path_and_schedule(self):
        err = InvalidScheduleError("/api/crons/bad", "invalid")
        assert err.path == "/api/crons/bad"
        assert err.schedule == "invalid"
        assert err.message == "Invalid cron schedule for /api/crons/bad: invalid"

    def test_details_default_to_empty_dict(self):
        assert NextCronError("boom").details == {}
