"""In-process TTL cache with namespaced helpers.

Best effort: a miss is never an error, callers recompute from the source of
truth. Expired entries are dropped lazily on access and eagerly by
``purge_expired()``, which the runtime schedules on a fixed period.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from auditwatch_common.constants import API_CACHE_TTL, CONFIG_CACHE_TTL, SESSION_CACHE_TTL

log = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheEntry:
    value: Any
    expiry: float

    def expired(self, now: float) -> bool:
        return now > self.expiry


class TTLCache:
    """Expiring key/value map."""

    def __init__(
        self,
        default_ttl: float = API_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value, self._clock() + ttl)

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._live_entry(key)
        return default if entry is None else entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, _MISSING) is not _MISSING

    def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._entries if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every entry whose expiry has passed. Returns the count removed."""
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            log.debug("Purged %d expired cache entries", len(expired))
        return len(expired)


class CacheNamespace:
    """View over a TTLCache that prefixes every key with ``prefix:``."""

    def __init__(self, cache: TTLCache, prefix: str, default_ttl: float) -> None:
        self.cache = cache
        self.prefix = prefix
        self.default_ttl = default_ttl

    def key(self, identifier: str) -> str:
        return f"{self.prefix}:{identifier}"

    def set(self, identifier: str, value: Any, ttl: float | None = None) -> None:
        self.cache.set(self.key(identifier), value, self.default_ttl if ttl is None else ttl)

    def get(self, identifier: str, default: Any = None) -> Any:
        return self.cache.get(self.key(identifier), default)

    def has(self, identifier: str) -> bool:
        return self.cache.has(self.key(identifier))

    def delete(self, identifier: str) -> bool:
        return self.cache.delete(self.key(identifier))

    def clear(self) -> int:
        return self.cache.delete_prefix(f"{self.prefix}:")


class CacheHelpers:
    """The namespaces hosted on the process cache."""

    def __init__(self, cache: TTLCache) -> None:
        self.api = CacheNamespace(cache, "api", API_CACHE_TTL)
        self.session = CacheNamespace(cache, "session", SESSION_CACHE_TTL)
        self.config = CacheNamespace(cache, "config", CONFIG_CACHE_TTL)
