"""One poll cycle of the audit stream: pull, persist, process, advance cursor."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auditwatch_common.constants import DEFAULT_POLL_LIMIT

from auditwatch.services.event_source import EventSource
from auditwatch.services.processor import AuditProcessor
from auditwatch.services.repositories import EventRepository, SettingsRepository

log = logging.getLogger(__name__)


@dataclass
class PollResult:
    fetched: int
    matched: int
    next_cursor: str | None


class AuditStream:
    def __init__(
        self,
        source: EventSource,
        events: EventRepository,
        settings: SettingsRepository,
        processor: AuditProcessor,
        *,
        limit: int = DEFAULT_POLL_LIMIT,
    ) -> None:
        self.source = source
        self.events = events
        self.settings = settings
        self.processor = processor
        self.limit = limit

    async def poll_once(self) -> PollResult:
        cursor = await self.settings.get_cursor()
        page = await self.source.poll(cursor, limit=self.limit, use_cache=False)

        # The last page is re-read until the stream moves on; only events
        # not seen before are alerted on.
        new_events = await self.events.save_events(page.events) if page.events else []
        matches = await self.processor.process_events(new_events)

        # Keep the old cursor when the stream reports no further page.
        if page.next_cursor and page.next_cursor != cursor:
            await self.settings.set_cursor(page.next_cursor)

        log.info(
            "Polled %d events, %d rule matches (cursor %s)",
            len(page.events), len(matches), page.next_cursor or cursor or "-",
        )
        return PollResult(
            fetched=len(page.events),
            matched=len(matches),
            next_cursor=page.next_cursor or cursor,
        )
