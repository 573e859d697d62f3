"""Durable collection store with a write-through shadow cache.

Items live in named collections. Each collection keeps an insertion-ordered
index of its ids; here the index is the ``seq`` column of ``store_items``, so an
item row and its index position are written (or rolled back) together.
The shadow cache only ever holds what the database already holds.

A flat key/value mode (``get_config`` / ``set_config``) shares the database and
is loaded fully into memory by ``init()``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

from sqlalchemy import Float, Integer, String, Text, UniqueConstraint, delete, or_, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from auditwatch.errors import StoreError
from auditwatch.services.cache import TTLCache

log = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class StoredItem(Base):
    __tablename__ = "store_items"
    __table_args__ = (UniqueConstraint("collection", "item_id", name="uq_store_item"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_id: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[float] = mapped_column(Float, nullable=False)
    expires_at: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)


class StoreSequence(Base):
    __tablename__ = "store_sequences"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    last_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ConfigEntry(Base):
    __tablename__ = "store_config"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[float] = mapped_column(Float, nullable=False)


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


class DurableStore:
    def __init__(
        self,
        database_url: str,
        *,
        shadow_ttl: float = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.database_url = database_url
        self.shadow_ttl = shadow_ttl
        self._clock = clock
        self._engine = create_async_engine(database_url)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)
        self._shadow = TTLCache(default_ttl=shadow_ttl, clock=clock)
        self._config: dict[str, str] = {}
        self._config_loaded = False
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Create tables and load the flat config namespace."""
        _ensure_sqlite_dir(self.database_url)
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await self.reload_config()

    async def close(self) -> None:
        self._shadow.clear()
        await self._engine.dispose()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    @staticmethod
    def _key(collection: str, item_id: str) -> str:
        return f"{collection}:{item_id}"

    def _expired(self, expires_at: float | None, now: float | None = None) -> bool:
        if expires_at is None:
            return False
        return (self._clock() if now is None else now) > expires_at

    def _shadow_set(self, key: str, payload: str, expires_at: float | None) -> None:
        ttl = self.shadow_ttl
        if expires_at is not None:
            ttl = min(ttl, expires_at - self._clock())
        if ttl > 0:
            self._shadow.set(key, payload, ttl)

    async def put(
        self,
        collection: str,
        item_id: str | int | None,
        data: Any,
        ttl: float | None = None,
    ) -> str:
        """Write ``data`` under ``item_id`` (assigned when None). Returns the id."""
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"{collection} item is not JSON serializable: {exc}") from exc

        now = self._clock()
        expires_at = now + ttl if ttl is not None else None

        async with self._write_lock:
            try:
                async with self._sessions() as session, session.begin():
                    if item_id is None:
                        item_id = await self._next_id(session, collection)
                    item_id = str(item_id)
                    row = await self._find(session, collection, item_id)
                    if row is not None and self._expired(row.expires_at, now):
                        # Logically absent already: re-create at the end of the index.
                        await session.delete(row)
                        await session.flush()
                        row = None
                    if row is None:
                        session.add(
                            StoredItem(
                                collection=collection,
                                item_id=item_id,
                                data=payload,
                                created_at=now,
                                expires_at=expires_at,
                            )
                        )
                    else:
                        row.data = payload
                        row.expires_at = expires_at
            except SQLAlchemyError as exc:
                log.error("Write to %s/%s failed: %s", collection, item_id, exc)
                raise StoreError(f"Failed to write {collection}/{item_id}: {exc}") from exc

            self._shadow_set(self._key(collection, item_id), payload, expires_at)
        return item_id

    async def get(self, collection: str, item_id: str | int) -> Any:
        """Return the item's data, or None if absent, expired or unreadable."""
        item_id = str(item_id)
        key = self._key(collection, item_id)
        payload = self._shadow.get(key)
        if payload is not None:
            return json.loads(payload)

        # Held across the read and the shadow fill so a concurrent write or
        # delete cannot be overwritten by the payload read here.
        async with self._write_lock:
            try:
                async with self._sessions() as session:
                    row = await self._find(session, collection, item_id)
            except SQLAlchemyError as exc:
                log.warning("Read of %s/%s failed: %s", collection, item_id, exc)
                return None
            if row is None:
                return None

            if self._expired(row.expires_at):
                try:
                    await self._delete_rows(collection, [item_id])
                except StoreError as exc:
                    log.warning("Dropping expired %s/%s failed: %s", collection, item_id, exc)
                return None

            try:
                data = json.loads(row.data)
            except (TypeError, ValueError):
                log.warning("Ignoring malformed record %s/%s", collection, item_id)
                return None
            self._shadow_set(key, row.data, row.expires_at)
        return data

    async def items(self, collection: str) -> list[tuple[str, Any]]:
        """All live ``(id, data)`` pairs in index order, skipping unreadable rows."""
        now = self._clock()
        try:
            async with self._sessions() as session:
                rows = (
                    await session.execute(
                        select(StoredItem)
                        .where(StoredItem.collection == collection)
                        .where(_live(now))
                        .order_by(StoredItem.seq)
                    )
                ).scalars().all()
        except SQLAlchemyError as exc:
            log.warning("Read of %s failed: %s", collection, exc)
            return []

        result: list[tuple[str, Any]] = []
        for row in rows:
            try:
                result.append((row.item_id, json.loads(row.data)))
            except (TypeError, ValueError):
                log.warning("Ignoring malformed record %s/%s", collection, row.item_id)
        return result

    async def delete(self, collection: str, item_id: str | int) -> bool:
        """Remove the item and its index entry. True if a durable record existed."""
        async with self._write_lock:
            return await self._delete_rows(collection, [str(item_id)]) > 0

    async def delete_many(self, collection: str, item_ids: list[str]) -> int:
        if not item_ids:
            return 0
        async with self._write_lock:
            return await self._delete_rows(collection, item_ids)

    async def list_ids(self, collection: str) -> list[str]:
        """Ids of live items in insertion order."""
        now = self._clock()
        try:
            async with self._sessions() as session:
                ids = (
                    await session.execute(
                        select(StoredItem.item_id)
                        .where(StoredItem.collection == collection)
                        .where(_live(now))
                        .order_by(StoredItem.seq)
                    )
                ).scalars().all()
        except SQLAlchemyError as exc:
            log.warning("Listing %s failed: %s", collection, exc)
            return []
        return list(ids)

    async def clear(self, collection: str) -> None:
        async with self._write_lock:
            try:
                async with self._sessions() as session, session.begin():
                    await session.execute(
                        delete(StoredItem).where(StoredItem.collection == collection)
                    )
            except SQLAlchemyError as exc:
                raise StoreError(f"Failed to clear {collection}: {exc}") from exc
            self._shadow.delete_prefix(f"{collection}:")

    async def cleanup(self) -> int:
        """Delete every expired item across collections. Returns the count removed."""
        now = self._clock()
        async with self._write_lock:
            try:
                async with self._sessions() as session, session.begin():
                    result = await session.execute(
                        delete(StoredItem)
                        .where(StoredItem.expires_at.is_not(None))
                        .where(StoredItem.expires_at < now)
                    )
            except SQLAlchemyError as exc:
                log.error("Store cleanup failed: %s", exc)
                return 0
        self._shadow.purge_expired()
        if result.rowcount:
            log.info("Removed %d expired stored items", result.rowcount)
        return result.rowcount

    async def _find(
        self, session: AsyncSession, collection: str, item_id: str
    ) -> StoredItem | None:
        return (
            await session.execute(
                select(StoredItem)
                .where(StoredItem.collection == collection)
                .where(StoredItem.item_id == item_id)
            )
        ).scalar_one_or_none()

    async def _next_id(self, session: AsyncSession, collection: str) -> str:
        sequence = await session.get(StoreSequence, collection)
        next_id = (sequence.last_id if sequence else 0) + 1
        while await self._find(session, collection, str(next_id)) is not None:
            next_id += 1
        if sequence is None:
            session.add(StoreSequence(collection=collection, last_id=next_id))
        else:
            sequence.last_id = next_id
        return str(next_id)

    async def _delete_rows(self, collection: str, item_ids: list[str]) -> int:
        """Delete rows and their shadow entries. Caller holds ``_write_lock``."""
        for item_id in item_ids:
            self._shadow.delete(self._key(collection, item_id))
        try:
            async with self._sessions() as session, session.begin():
                result = await session.execute(
                    delete(StoredItem)
                    .where(StoredItem.collection == collection)
                    .where(StoredItem.item_id.in_(item_ids))
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete from {collection}: {exc}") from exc
        return result.rowcount

    # ------------------------------------------------------------------
    # Flat key/value config
    # ------------------------------------------------------------------

    async def reload_config(self) -> None:
        try:
            async with self._sessions() as session:
                rows = (await session.execute(select(ConfigEntry))).scalars().all()
        except SQLAlchemyError as exc:
            log.warning("Loading config failed: %s", exc)
            rows = []

        config: dict[str, str] = {}
        for row in rows:
            try:
                json.loads(row.value)
            except (TypeError, ValueError):
                log.warning("Ignoring malformed config value for %r", row.key)
                continue
            config[row.key] = row.value
        self._config = config
        self._config_loaded = True

    async def get_config(self, key: str, default: Any = None) -> Any:
        if not self._config_loaded:
            await self.reload_config()
        payload = self._config.get(key)
        return default if payload is None else json.loads(payload)

    async def get_all_config(self) -> dict[str, Any]:
        if not self._config_loaded:
            await self.reload_config()
        return {key: json.loads(payload) for key, payload in self._config.items()}

    async def set_config(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Config value for {key!r} is not JSON serializable: {exc}") from exc

        async with self._write_lock:
            try:
                async with self._sessions() as session, session.begin():
                    await session.merge(
                        ConfigEntry(key=key, value=payload, updated_at=self._clock())
                    )
            except SQLAlchemyError as exc:
                log.error("Writing config %r failed: %s", key, exc)
                raise StoreError(f"Failed to write config {key!r}: {exc}") from exc
            self._config[key] = payload

    async def delete_config(self, key: str) -> bool:
        async with self._write_lock:
            try:
                async with self._sessions() as session, session.begin():
                    result = await session.execute(delete(ConfigEntry).where(ConfigEntry.key == key))
            except SQLAlchemyError as exc:
                raise StoreError(f"Failed to delete config {key!r}: {exc}") from exc
            self._config.pop(key, None)
        return result.rowcount > 0


def _live(now: float):
    return or_(StoredItem.expires_at.is_(None), StoredItem.expires_at >= now)
