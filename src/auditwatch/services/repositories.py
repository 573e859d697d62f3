"""Typed access to the store's collections and config namespace."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from auditwatch_common import (
    CHANNELS_COLLECTION,
    EVENTS_COLLECTION,
    RULES_COLLECTION,
    AlertChannel,
    AlertRule,
    AuditEvent,
    ChannelStatus,
    EventCriteria,
    SourceSettings,
)
from auditwatch_common.constants import CURSOR_CONFIG_KEY, DEFAULT_MAX_EVENTS, SOURCE_CONFIG_KEY

from auditwatch.errors import NotFoundError
from auditwatch.services.cache import CacheNamespace
from auditwatch.services.event_filter import filter_events
from auditwatch.services.store import DurableStore

log = logging.getLogger(__name__)


class EventRepository:
    def __init__(
        self,
        store: DurableStore,
        *,
        ttl: float | None = None,
        max_events: int = DEFAULT_MAX_EVENTS,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self.max_events = max_events

    async def save_events(self, events: Iterable[AuditEvent]) -> list[AuditEvent]:
        """Store the events and return the ones that were not already stored."""
        known = set(await self.store.list_ids(EVENTS_COLLECTION))
        new: list[AuditEvent] = []
        for event in events:
            await self.store.put(
                EVENTS_COLLECTION, event.id, event.model_dump(mode="json"), ttl=self.ttl
            )
            if event.id not in known:
                known.add(event.id)
                new.append(event)
        await self._enforce_cap()
        return new

    async def _enforce_cap(self) -> None:
        ids = await self.store.list_ids(EVENTS_COLLECTION)
        overflow = len(ids) - self.max_events
        if overflow > 0:
            removed = await self.store.delete_many(EVENTS_COLLECTION, ids[:overflow])
            log.info("Dropped %d oldest events beyond the %d cap", removed, self.max_events)

    async def get(self, event_id: str) -> AuditEvent | None:
        data = await self.store.get(EVENTS_COLLECTION, event_id)
        return _parse(AuditEvent, data, EVENTS_COLLECTION, event_id)

    async def all(self) -> list[AuditEvent]:
        events = []
        for item_id, data in await self.store.items(EVENTS_COLLECTION):
            event = _parse(AuditEvent, data, EVENTS_COLLECTION, item_id)
            if event is not None:
                events.append(event)
        return events

    async def query(
        self, criteria: EventCriteria | None = None, limit: int | None = None
    ) -> list[AuditEvent]:
        """Stored events passing the criteria, most recent ``limit`` in insertion order."""
        events = await self.all()
        if criteria is not None:
            events = filter_events(events, criteria)
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    async def clear(self) -> None:
        await self.store.clear(EVENTS_COLLECTION)


class _EntityRepository:
    """Upsert-by-id repository for rules and channels, with a cached listing."""

    collection: str
    model: type

    def __init__(self, store: DurableStore, cache: CacheNamespace) -> None:
        self.store = store
        self.cache = cache

    async def all(self) -> list[Any]:
        cached = self.cache.get(self.collection)
        if cached is not None:
            return list(cached)
        entities = []
        for item_id, data in await self.store.items(self.collection):
            entity = _parse(self.model, data, self.collection, item_id)
            if entity is not None:
                entities.append(entity)
        self.cache.set(self.collection, entities)
        return list(entities)

    async def get(self, entity_id: int) -> Any:
        data = await self.store.get(self.collection, entity_id)
        entity = _parse(self.model, data, self.collection, entity_id)
        if entity is None:
            raise NotFoundError(f"{self.collection} item {entity_id} not found")
        return entity

    async def save(self, entity: Any) -> Any:
        """Insert or replace. Entities without an id get one assigned."""
        # Re-validate so a model mutated after construction is still checked.
        entity = self.model.model_validate(entity.model_dump())
        data = entity.model_dump(mode="json", exclude={"id"})
        item_id = await self.store.put(self.collection, entity.id, data)
        self.cache.delete(self.collection)
        return entity.model_copy(update={"id": int(item_id)})

    async def delete(self, entity_id: int) -> bool:
        removed = await self.store.delete(self.collection, entity_id)
        self.cache.delete(self.collection)
        return removed


class RuleRepository(_EntityRepository):
    collection = RULES_COLLECTION
    model = AlertRule


class ChannelRepository(_EntityRepository):
    collection = CHANNELS_COLLECTION
    model = AlertChannel

    async def set_status(self, channel_id: int, status: ChannelStatus) -> AlertChannel:
        channel = await self.get(channel_id)
        return await self.save(channel.model_copy(update={"status": status}))


class SettingsRepository:
    """Source credentials and the stream cursor in the flat config namespace."""

    def __init__(self, store: DurableStore) -> None:
        self.store = store

    async def save_source(self, settings: SourceSettings) -> None:
        await self.store.set_config(SOURCE_CONFIG_KEY, settings.model_dump())

    async def load_source(self) -> SourceSettings | None:
        data = await self.store.get_config(SOURCE_CONFIG_KEY)
        return _parse(SourceSettings, data, "config", SOURCE_CONFIG_KEY)

    async def get_cursor(self) -> str | None:
        return await self.store.get_config(CURSOR_CONFIG_KEY)

    async def set_cursor(self, cursor: str | None) -> None:
        if cursor is None:
            await self.store.delete_config(CURSOR_CONFIG_KEY)
        else:
            await self.store.set_config(CURSOR_CONFIG_KEY, cursor)


def _parse(model: type, data: Any, collection: str, item_id: Any) -> Any:
    if data is None:
        return None
    if "id" in model.model_fields and isinstance(data, dict) and "id" not in data:
        data = {**data, "id": item_id}
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        log.warning(
            "Ignoring invalid %s record %s (%d validation errors)",
            collection, item_id, exc.error_count(),
        )
        return None
