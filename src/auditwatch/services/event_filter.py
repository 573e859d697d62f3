"""Event filtering shared by the dashboard and stored-event queries."""

from __future__ import annotations

from typing import Iterable

from auditwatch_common import AuditEvent, EventCriteria


def matches(event: AuditEvent, criteria: EventCriteria) -> bool:
    """True if the event satisfies every provided criterion."""
    if criteria.action and criteria.action not in event.action:
        return False

    if criteria.actor:
        actor = event.actor
        if not any(token in actor.name or token in actor.email for token in criteria.actor):
            return False

    if criteria.start is not None and event.time < criteria.start:
        return False
    if criteria.end is not None and event.time > criteria.end:
        return False

    if criteria.ip:
        # An event without a location cannot satisfy an IP criterion.
        if event.location is None:
            return False
        if not any(token in event.location.ip for token in criteria.ip):
            return False

    return True


def filter_events(events: Iterable[AuditEvent], criteria: EventCriteria) -> list[AuditEvent]:
    return [event for event in events if matches(event, criteria)]
