"""Process runtime — builds and owns the cache, store, HTTP client and tasks.

One Runtime is constructed at process start (CLI command or API lifespan) and
passed to everything that needs shared state. ``stop()`` cancels the
scheduled sweeps and closes every handle.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Iterable

import httpx

from auditwatch_common import AlertRule, AuditEvent, AuditwatchConfig, ChannelStatus

from auditwatch.errors import NotConfiguredError
from auditwatch.services.cache import CacheHelpers, TTLCache
from auditwatch.services.dispatcher import AlertDispatcher
from auditwatch.services.event_source import EventSource
from auditwatch.services.processor import AuditProcessor
from auditwatch.services.repositories import (
    ChannelRepository,
    EventRepository,
    RuleRepository,
    SettingsRepository,
)
from auditwatch.services.scheduler import PeriodicTask
from auditwatch.services.store import DurableStore
from auditwatch.services.stream import AuditStream, PollResult
from auditwatch.services.transports import default_transports

log = logging.getLogger(__name__)


class Runtime:
    def __init__(
        self,
        config: AuditwatchConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.cache = TTLCache(default_ttl=config.cache_default_ttl, clock=clock)
        self.caches = CacheHelpers(self.cache)
        self.store = DurableStore(config.database_url, shadow_ttl=config.shadow_ttl, clock=clock)

        self._owns_http = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=config.http_timeout)

        self.events = EventRepository(
            self.store, ttl=config.event_ttl, max_events=config.max_events
        )
        self.rules = RuleRepository(self.store, self.caches.config)
        self.channels = ChannelRepository(self.store, self.caches.config)
        self.settings = SettingsRepository(self.store)
        self.dispatcher = AlertDispatcher(
            default_transports(self.http), timeout=config.delivery_timeout
        )

        self.tasks = [
            PeriodicTask("cache-sweep", config.cache_sweep_interval, self.cache.purge_expired),
            PeriodicTask("store-cleanup", config.store_cleanup_interval, self.store.cleanup),
        ]
        self._poller = PeriodicTask("stream-poll", config.poll_interval, self.poll_once)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, *, schedule: bool = True) -> None:
        await self.store.init()
        if schedule:
            for task in self.tasks:
                task.start()
        log.debug("Runtime started (database %s)", self.config.database_url)

    async def stop(self) -> None:
        await self._poller.stop()
        for task in self.tasks:
            await task.stop()
        if self._owns_http:
            await self.http.aclose()
        await self.store.close()
        self.cache.clear()

    @classmethod
    @asynccontextmanager
    async def open(
        cls, config: AuditwatchConfig, *, schedule: bool = True, **kwargs
    ) -> AsyncIterator[Runtime]:
        runtime = cls(config, **kwargs)
        await runtime.start(schedule=schedule)
        try:
            yield runtime
        finally:
            await runtime.stop()

    def start_polling(self) -> None:
        self._poller.start()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def processor(self) -> AuditProcessor:
        """A processor over the currently saved rules and channels."""
        return AuditProcessor(self.dispatcher, await self.rules.all(), await self.channels.all())

    async def process_events(
        self, events: Iterable[AuditEvent]
    ) -> list[tuple[AuditEvent, AlertRule]]:
        processor = await self.processor()
        return await processor.process_events(events)

    async def event_source(self) -> EventSource:
        settings = await self.settings.load_source()
        if settings is None:
            raise NotConfiguredError("Event source is not configured. Run 'auditwatch setup save'.")
        return EventSource(self.http, settings, self.caches.api)

    async def poll_once(self) -> PollResult:
        stream = AuditStream(
            await self.event_source(),
            self.events,
            self.settings,
            await self.processor(),
            limit=self.config.poll_limit,
        )
        return await stream.poll_once()

    async def test_channel(self, channel_id: int) -> ChannelStatus:
        """Send a test through the channel and record the outcome on it."""
        channel = await self.channels.get(channel_id)
        transport = self.dispatcher.transports[channel.type]
        try:
            await asyncio.wait_for(
                transport.test(channel.configuration), self.config.delivery_timeout
            )
        except Exception as exc:
            log.warning("Channel %r test failed: %s", channel.name, exc)
            status = ChannelStatus.FAILED
        else:
            status = ChannelStatus.CONNECTED
        await self.channels.set_status(channel_id, status)
        return status
