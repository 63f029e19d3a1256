"""
PathFilter — narrows the job list with a wildcard pattern.

Only ``*`` is special: it becomes ``.*`` and the result must match the
whole path. Every other character is handed to the regex engine as-is,
so ``.`` still matches any character and ``(`` opens a group. Patterns
that do not compile raise InvalidFilterError.
"""

from __future__ import annotations

import re

from nextcron.core.errors import InvalidFilterError
from nextcron.scheduler.job import Job


class PathFilter:
    """
    Usage:
        f = PathFilter("/api/crons/notifications/*")
        visible = f.apply(config.crons)
    """

    def __init__(self, pattern: str | None = None) -> None:
        self._pattern = pattern or None
        self._regex: re.Pattern[str] | None = None
        if self._pattern is not None:
            try:
                self._regex = re.compile(self._pattern.replace("*", ".*"))
            except re.error as e:
                raise InvalidFilterError(self._pattern, str(e)) from e

    @property
    def pattern(self) -> str | None:
        return self._pattern

    def matches(self, path: str) -> bool:
        if self._regex is None:
            return True
        return self._regex.fullmatch(path) is not None

    def apply(self, jobs: list[Job]) -> list[Job]:
        """Keep matching jobs, in their original order."""
        if self._regex is None:
            return list(jobs)
        return [job for job in jobs if self.matches(job.path)]
