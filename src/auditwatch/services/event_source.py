"""Event source — cursor-based pull from the organization events-stream API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from auditwatch_common import AuditEvent, SourceSettings
from auditwatch_common.constants import DEFAULT_POLL_LIMIT

from auditwatch.errors import SourceError
from auditwatch.services.cache import CacheNamespace

log = logging.getLogger(__name__)


@dataclass
class EventPage:
    events: list[AuditEvent] = field(default_factory=list)
    next_cursor: str | None = None


def _epoch_ms(value: datetime) -> str:
    return str(int(value.timestamp() * 1000))


def parse_page(data: dict[str, Any]) -> EventPage:
    """Turn a raw events-stream response into an EventPage, skipping bad events."""
    events: list[AuditEvent] = []
    for raw in data.get("data") or []:
        try:
            events.append(AuditEvent.from_api(raw))
        except (KeyError, TypeError, ValidationError) as exc:
            log.warning("Skipping unparseable event %s: %s", raw.get("id", "?"), exc)
    return EventPage(events=events, next_cursor=(data.get("meta") or {}).get("next"))


class EventSource:
    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: SourceSettings,
        cache: CacheNamespace | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.cache = cache

    @property
    def url(self) -> str:
        base = self.settings.base_url.rstrip("/")
        return f"{base}/v1/orgs/{self.settings.org_id}/events-stream"

    async def poll(
        self,
        cursor: str | None = None,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = DEFAULT_POLL_LIMIT,
        sort_order: str = "asc",
        use_cache: bool = True,
    ) -> EventPage:
        """Fetch one page of events. Raises SourceError on network or HTTP failure."""
        params: dict[str, str] = {"limit": str(limit), "sortOrder": sort_order}
        if cursor:
            params["cursor"] = cursor
        if start is not None:
            params["from"] = _epoch_ms(start)
        if end is not None:
            params["to"] = _epoch_ms(end)

        cache_key = f"{self.settings.org_id}:{json.dumps(params, sort_keys=True)}"
        use_cache = use_cache and self.cache is not None
        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return parse_page(cached)

        try:
            resp = await self.client.get(
                self.url,
                params=params,
                headers={
                    "Authorization": f"Bearer {self.settings.api_key}",
                    "Accept": "application/json",
                },
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SourceError(f"Events stream returned {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SourceError(f"Fetching audit events failed: {exc}") from exc

        if use_cache:
            self.cache.set(cache_key, data)
        return parse_page(data)

    async def test_connection(self) -> bool:
        """True if a single-event page can be fetched with these settings."""
        try:
            await self.poll(limit=1, use_cache=False)
        except SourceError as exc:
            log.warning("Event source connection test failed: %s", exc)
            return False
        return True
