"""
Logging setup — console output in the runner's classic format, optional file.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from nextcron.core.types import Verbosity


class _MaxLevelFilter(logging.Filter):
    """Pass only records below a given level."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


class _IsoFormatter(logging.Formatter):
    """Render asctime as a local ISO-8601 timestamp."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return datetime.fromtimestamp(record.created).astimezone().isoformat()


def setup_logging(
    console_level: int = logging.INFO,
    log_dir: Path | None = None,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Setup nextcron logging.

    Console lines look like ``[2024-01-01T09:00:00.000000+00:00] message``.
    Warnings and errors go to stderr, everything else to stdout.

    Args:
        console_level: Minimum level for console output
        log_dir: Directory for a daily log file (no file when None)
        file_level: Minimum level for file output

    Returns:
        The configured logger
    """
    logger = logging.getLogger("nextcron")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Clear existing handlers
    logger.handlers = []

    console_formatter = _IsoFormatter("[%(asctime)s] %(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(console_level)
    stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(console_formatter)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(max(console_level, logging.WARNING))
    stderr_handler.setFormatter(console_formatter)
    logger.addHandler(stderr_handler)

    if log_dir is not None:
        log_dir = log_dir.expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"nextcron_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.debug(f"Logging initialized. File: {log_file}")

    return logger


class RunLog:
    """
    Verbosity-gated view of a logger.

    QUIET still reports errors; BASIC adds progress; EXTENDED adds detail.

    Usage:
        log = RunLog(logging.getLogger(__name__), Verbosity.BASIC)
        log.info("Scheduled: /api/crons/daily")   # shown at BASIC and up
        log.error("✗ Failed: /api/crons/daily")   # always shown
    """

    def __init__(self, logger: logging.Logger, verbosity: Verbosity) -> None:
        self._logger = logger
        self.verbosity = verbosity

    def info(self, message: str) -> None:
        if self.verbosity >= Verbosity.BASIC:
            self._logger.info(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def detail(self, message: str, is_error: bool = False) -> None:
        if self.verbosity < Verbosity.EXTENDED:
            return
        if is_error:
            self._logger.error(message)
        else:
            self._logger.info(message)
