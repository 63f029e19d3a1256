"""
Scheduler Job — the data model read from vercel.json.

A Job is one (path, schedule) pair. The whole file parses to a JobConfig:

    {"crons": [{"path": "/api/crons/daily", "schedule": "0 9 * * *"}]}

Jobs are identified by path. Lookups take the first match.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Job:
    """A configured cron callback."""

    path: str       # appended verbatim to the base URL
    schedule: str   # 5-field cron expression

    def to_dict(self) -> dict:
        return {"path": self.path, "schedule": self.schedule}

    @classmethod
    def from_dict(cls, d: dict) -> "Job":
        return cls(path=d["path"], schedule=d["schedule"])


@dataclass(slots=True)
class JobConfig:
    """Parsed contents of the cron config file."""

    crons: list[Job] = field(default_factory=list)

    def find(self, path: str) -> Job | None:
        """Return the first job with exactly this path."""
        return next((job for job in self.crons if job.path == path), None)
