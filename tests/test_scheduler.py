"""Tests for periodic tasks."""

from __future__ import annotations

import asyncio

from auditwatch.services.scheduler import PeriodicTask


class TestPeriodicTask:
    async def test_runs_until_stopped(self):
        calls: list[int] = []
        task = PeriodicTask("tick", 0.01, lambda: calls.append(1))
        task.start()
        assert task.running
        await asyncio.sleep(0.1)
        await task.stop()
        assert not task.running
        count = len(calls)
        assert count >= 2
        await asyncio.sleep(0.05)
        assert len(calls) == count

    async def test_failures_do_not_stop_schedule(self):
        calls: list[int] = []

        async def job():
            calls.append(1)
            raise RuntimeError("boom")

        task = PeriodicTask("flaky", 0.01, job)
        task.start()
        await asyncio.sleep(0.1)
        await task.stop()
        assert len(calls) >= 2

    async def test_run_once_sync_and_async(self):
        async def async_job():
            return "async"

        assert await PeriodicTask("s", 1, lambda: "sync").run_once() == "sync"
        assert await PeriodicTask("a", 1, async_job).run_once() == "async"

    async def test_stop_before_start(self):
        await PeriodicTask("idle", 1, lambda: None).stop()
