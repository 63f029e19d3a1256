"""Shared test fixtures for nextcron."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest

SAMPLE_CRONS = [
    {"path": "/api/crons/test1", "schedule": "* * * * *"},
    {"path": "/api/crons/test2", "schedule": "0 8 * * *"},
    {"path": "/api/crons/notifications/test3", "schedule": "*/5 * * * *"},
]

BASE_URL = "http://localhost:3000"


class ScriptedTransport:
    """
    Mock transport that replays outcomes in order.

    Each outcome is an httpx.Response or an exception to raise.
    Once the script runs out every request gets a plain 200.
    """

    def __init__(self, *outcomes: httpx.Response | Exception) -> None:
        self._outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self._outcomes.pop(0) if self._outcomes else httpx.Response(200)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep the developer's env and working directory out of every test."""
    for var in (
        "CRON_SECRET",
        "NEXTCRON_BASE_URL",
        "NEXTCRON_CONFIG",
        "NEXTCRON_VERBOSE",
        "NEXTCRON_FILTER",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # setup_logging() detaches the nextcron logger from root; undo for caplog
    logger = logging.getLogger("nextcron")
    logger.handlers = []
    logger.propagate = True


@pytest.fixture
def write_config(tmp_path):
    """Write a vercel.json and return its path."""

    def _write(data: object, name: str = "vercel.json") -> Path:
        path = tmp_path / name
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def config_file(write_config) -> Path:
    return write_config({"crons": SAMPLE_CRONS})


@pytest.fixture
def sample_crons() -> list[dict]:
    return [dict(entry) for entry in SAMPLE_CRONS]


@pytest.fixture
def scripted():
    """Factory: scripted(httpx.Response(200), httpx.ConnectError("down"), ...)."""
    return ScriptedTransport
