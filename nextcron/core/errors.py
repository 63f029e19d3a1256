"""
nextcron exception hierarchy.

Every error in the system inherits from NextCronError.
Configuration problems and scheduling problems have their own branches
so callers can catch either group.

Usage:
    try:
        await runner.execute_one("/api/crons/daily")
    except JobNotFoundError as e:
        # Unknown path
    except NextCronError as e:
        # Anything else raised by the runner

Per-dispatch failures (HTTP 4xx/5xx, network errors) are never raised;
they come back as a DispatchResult with success=False.
"""


class NextCronError(Exception):
    """Base exception for all nextcron errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Configuration Errors ━━━


class ConfigError(NextCronError):
    """Configuration is invalid, missing, or malformed."""

    pass


class InvalidBaseUrlError(ConfigError):
    """Base URL is missing or cannot be parsed."""

    pass


class ConfigNotFoundError(ConfigError):
    """The cron config file does not exist."""

    def __init__(self, path: str, details: dict | None = None):
        self.path = path
        super().__init__(f"Config file not found: {path}", details)


class ConfigParseError(ConfigError):
    """The cron config file is not valid JSON."""

    def __init__(self, path: str, reason: str, details: dict | None = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid JSON in {path}: {reason}", details)


class ConfigShapeError(ConfigError):
    """The cron config parsed but has the wrong structure."""

    pass


class InvalidFilterError(ConfigError):
    """The filter pattern does not translate to a usable matcher."""

    def __init__(self, pattern: str, reason: str, details: dict | None = None):
        self.pattern = pattern
        super().__init__(f"Invalid filter pattern {pattern!r}: {reason}", details)


# ━━━ Scheduling Errors ━━━


class SchedulerError(NextCronError):
    """A scheduling operation could not be carried out."""

    pass


class NoMatchingJobsError(SchedulerError):
    """The filter left no jobs to run."""

    def __init__(self, details: dict | None = None):
        super().__init__("No cron jobs found matching the filter", details)


class InvalidScheduleError(SchedulerError):
    """A job's schedule is not a valid 5-field cron expression."""

    def __init__(self, path: str, schedule: str, details: dict | None = None):
        self.path = path
        self.schedule = schedule
        super().__init__(f"Invalid cron schedule for {path}: {schedule}", details)


class JobNotFoundError(SchedulerError):
    """No configured job has the requested path."""

    def __init__(self, path: str, details: dict | None = None):
        self.path = path
        super().__init__(f"Cron job not found: {path}", details)
