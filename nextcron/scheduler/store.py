"""
ConfigStore — reads the job list from vercel.json.

Nothing is cached: every load() goes back to disk so edits to the file
are picked up by the next operation without restarting the runner.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from nextcron.core.config import DEFAULT_CONFIG_PATH
from nextcron.core.errors import ConfigNotFoundError, ConfigParseError, ConfigShapeError
from nextcron.scheduler.job import Job, JobConfig

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Loads and validates the declared cron jobs.

    Usage:
        store = ConfigStore("./vercel.json")
        config = store.load()
        for job in config.crons:
            print(job.path, job.schedule)
    """

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = Path(config_path or DEFAULT_CONFIG_PATH)

    @property
    def path(self) -> Path:
        """Absolute location of the config file."""
        return self._config_path.resolve()

    def load(self) -> JobConfig:
        """
        Read and parse the config file.

        Raises:
            ConfigNotFoundError: file does not exist
            ConfigParseError: file is not valid JSON
            ConfigShapeError: no "crons" array, or a malformed entry
        """
        path = self.path
        if not path.is_file():
            raise ConfigNotFoundError(str(path))

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigParseError(str(path), str(e)) from e

        crons = data.get("crons") if isinstance(data, dict) else None
        if not isinstance(crons, list):
            raise ConfigShapeError(
                'Invalid vercel.json: missing "crons" array',
                details={"path": str(path)},
            )

        jobs = [_parse_entry(entry, index, path) for index, entry in enumerate(crons)]
        logger.debug(f"Loaded {len(jobs)} cron job(s) from {path}")
        return JobConfig(crons=jobs)


def _parse_entry(entry: object, index: int, path: Path) -> Job:
    if (
        not isinstance(entry, dict)
        or not isinstance(entry.get("path"), str)
        or not isinstance(entry.get("schedule"), str)
    ):
        raise ConfigShapeError(
            f'Invalid vercel.json: crons[{index}] must have string "path" and "schedule"',
            details={"path": str(path), "index": index},
        )
    return Job.from_dict(entry)
