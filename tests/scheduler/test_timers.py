"""Tests for nextcron/scheduler/timers.py"""
from __future__ import annotations

import asyncio
import time

import pytest

from nextcron.scheduler.job import Job
from nextcron.scheduler.timers import CronTimer, TimerRegistry
from nextcron.scheduler.triggers import CronTrigger


@pytest.fixture
def fast_trigger(monkeypatch):
    """Make every schedule mature 10ms from now."""
    monkeypatch.setattr(
        CronTrigger,
        "next_fire_time",
        lambda self, now=None: time.time() + 0.01,
    )


async def _settle() -> None:
    # let cancellations run
    await asyncio.sleep(0)
    await asyncio.sleep(0)


@pytest.mark.asyncio
class TestCronTimer:
    async def test_fires_repeatedly(self, fast_trigger):
        calls: list[float] = []

        async def on_fire():
            calls.append(time.time())

        timer = CronTimer(Job("/a", "* * * * *"), on_fire)
        timer.start()
        await asyncio.sleep(0.15)
        timer.stop()
        await _settle()

        assert len(calls) >= 2
        assert timer.fire_count >= len(calls)

    async def test_stop_prevents_new_firings(self, fast_trigger):
        calls = []

        async def on_fire():
            calls.append(1)

        timer = CronTimer(Job("/a", "* * * * *"), on_fire)
        timer.start()
        await asyncio.sleep(0.05)
        timer.stop()
        await _settle()
        seen = len(calls)

        await asyncio.sleep(0.05)
        assert len(calls) == seen
        assert not timer.running

    async def test_failing_callback_keeps_timer_alive(self, fast_trigger):
        calls = []

        async def on_fire():
            calls.append(1)
            raise RuntimeError("handler blew up")

        timer = CronTimer(Job("/a", "* * * * *"), on_fire)
        timer.start()
        await asyncio.sleep(0.15)

        assert timer.running
        assert len(calls) >= 2
        timer.stop()
        await _settle()

    async def test_slow_callback_does_not_block_firing(self, fast_trigger):
        started = []
        release = asyncio.Event()

        async def on_fire():
            started.append(1)
            await release.wait()

        timer = CronTimer(Job("/a", "* * * * *"), on_fire)
        timer.start()
        await asyncio.sleep(0.15)

        # several callbacks are in flight at once
        assert len(started) >= 2
        release.set()
        timer.stop()
        await _settle()

    async def test_does_not_fire_before_schedule(self):
        calls = []

        async def on_fire():
            calls.append(1)

        # "0 0 1 1 *" is at most once a year
        timer = CronTimer(Job("/a", "0 0 1 1 *"), on_fire)
        timer.start()
        await asyncio.sleep(0.05)
        timer.stop()
        await _settle()
        assert calls == []


@pytest.mark.asyncio
class TestTimerRegistry:
    async def test_register_and_stop_all(self):
        registry = TimerRegistry()

        async def noop():
            return None

        for path in ("/a", "/b", "/c"):
            registry.register(Job(path, "* * * * *"), noop)

        assert len(registry) == 3
        assert registry.paths == ["/a", "/b", "/c"]
        assert "/b" in registry
        assert registry.get("/a").running

        timers = [registry.get(p) for p in registry.paths]
        assert registry.stop_all() == 3
        assert len(registry) == 0
        assert all(not t.running for t in timers)
        await _settle()

    async def test_stop_all_is_idempotent(self):
        registry = TimerRegistry()
        assert registry.stop_all() == 0
        assert registry.stop_all() == 0

    async def test_register_same_path_replaces(self):
        registry = TimerRegistry()

        async def noop():
            return None

        first = registry.register(Job("/a", "* * * * *"), noop)
        second = registry.register(Job("/a", "0 8 * * *"), noop)

        assert len(registry) == 1
        assert registry.get("/a") is second
        assert not first.running
        registry.stop_all()
        await _settle()
