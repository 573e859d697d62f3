"""Audit event endpoints — stored queries, stats, batch processing and polling."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from auditwatch_common import AuditEvent, EventCriteria

from auditwatch.runtime import Runtime
from auditwatch.services.event_filter import filter_events
from auditwatch.services.metrics import summarize_events
from auditwatch_api.deps import get_runtime

router = APIRouter(tags=["events"])


def _criteria(
    action: Optional[str] = Query(None, description="Action substring"),
    actor: list[str] = Query([], description="Actor name/email substrings"),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    ip: list[str] = Query([], description="Source IP substrings"),
) -> EventCriteria:
    return EventCriteria(action=action, actor=actor, start=start, end=end, ip=ip)


@router.get("/events")
async def list_events(
    criteria: EventCriteria = Depends(_criteria),
    limit: int = Query(100, ge=1, le=1000),
    rt: Runtime = Depends(get_runtime),
):
    """Stored events passing the filters, newest ``limit`` in arrival order."""
    events = await rt.events.query(criteria, limit=limit)
    return {"total": len(events), "items": [e.model_dump(mode="json") for e in events]}


@router.get("/events/stats")
async def event_stats(
    criteria: EventCriteria = Depends(_criteria),
    rt: Runtime = Depends(get_runtime),
):
    return summarize_events(await rt.events.query(criteria)).model_dump()


@router.get("/events/stream")
async def stream_events(
    criteria: EventCriteria = Depends(_criteria),
    limit: int = Query(50, ge=1, le=200),
    rt: Runtime = Depends(get_runtime),
):
    """Latest events straight from the source, narrowed by the filters.

    Responses are served from the api cache namespace, so repeated dashboard
    refreshes within its TTL do not hit the upstream API.
    """
    source = await rt.event_source()
    page = await source.poll(start=criteria.start, end=criteria.end, limit=limit, sort_order="desc")
    events = filter_events(page.events, criteria)
    return {"total": len(events), "items": [e.model_dump(mode="json") for e in events]}


@router.post("/events/process")
async def process_events(
    events: list[AuditEvent],
    save: bool = Query(True, description="Also persist the batch"),
    rt: Runtime = Depends(get_runtime),
):
    """Match a batch of events against the rules and dispatch alerts."""
    if save and events:
        await rt.events.save_events(events)
    matches = await rt.process_events(events)
    return {
        "received": len(events),
        "matched": len(matches),
        "matches": [{"event_id": event.id, "rule": rule.name} for event, rule in matches],
    }


@router.post("/events/poll")
async def poll_events(rt: Runtime = Depends(get_runtime)):
    """Run one poll cycle against the configured event source."""
    return asdict(await rt.poll_once())
