"""
Cron triggers — validate schedules and compute the next fire time.

Usage:
    if is_valid_schedule("0 9 * * 1-5"):
        next_ts = CronTrigger("0 9 * * 1-5").next_fire_time()

Only the standard 5-field grammar (minute hour day-of-month month
day-of-week) is accepted. croniter also understands a seconds or year
field; those expressions are rejected here.
"""

from __future__ import annotations

import time
from datetime import datetime

from croniter import croniter

CRON_FIELD_COUNT = 5


def is_valid_schedule(expression: str) -> bool:
    """True if ``expression`` is a well-formed 5-field cron expression."""
    if not isinstance(expression, str):
        return False
    if len(expression.split()) != CRON_FIELD_COUNT:
        return False
    return croniter.is_valid(expression)


class CronTrigger:
    """
    Fires on a cron schedule, evaluated in local time.

    expression: standard 5-field cron string, e.g. "*/5 * * * *"
    """

    def __init__(self, expression: str) -> None:
        if not is_valid_schedule(expression):
            raise ValueError(f"Invalid cron expression: {expression!r}")
        self._expression = expression

    @property
    def expression(self) -> str:
        return self._expression

    def next_fire_time(self, now: float | None = None) -> float:
        """Return the unix timestamp of the first match strictly after ``now``."""
        base = now if now is not None else time.time()
        # Naive local wall clock; .timestamp() applies the zone's DST rules
        start = datetime.fromtimestamp(base)
        it = croniter(self._expression, start)
        return it.get_next(datetime).timestamp()

    @property
    def description(self) -> str:
        return f"cron({self._expression})"
