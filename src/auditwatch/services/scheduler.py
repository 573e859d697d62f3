"""Cancellable periodic tasks owned by the runtime."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

log = logging.getLogger(__name__)


class PeriodicTask:
    """Run ``job`` every ``interval`` seconds until stopped.

    The job may be a plain function or a coroutine function. A failing run is
    logged and the schedule continues.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        job: Callable[[], Any | Awaitable[Any]],
    ) -> None:
        self.name = name
        self.interval = interval
        self.job = job
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> Any:
        result = self.job()
        if asyncio.iscoroutine(result):
            result = await result
        return result

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as exc:
                log.error("Scheduled task %s failed: %s", self.name, exc)
