"""Aggregate counts over a set of events for the dashboard."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from pydantic import BaseModel, Field

from auditwatch_common import AuditEvent

from auditwatch.services.matcher import classify_severity


class EventSummary(BaseModel):
    total: int = 0
    by_action: dict[str, int] = Field(default_factory=dict)
    by_country: dict[str, int] = Field(default_factory=dict)
    by_hour: list[int] = Field(default_factory=lambda: [0] * 24)
    by_severity: dict[str, int] = Field(default_factory=dict)
    top_actors: list[tuple[str, int]] = Field(default_factory=list)


def summarize_events(events: Iterable[AuditEvent], top: int = 5) -> EventSummary:
    actions: Counter[str] = Counter()
    countries: Counter[str] = Counter()
    severities: Counter[str] = Counter()
    actors: Counter[str] = Counter()
    hours = [0] * 24
    total = 0

    for event in events:
        total += 1
        actions[event.action.split(".")[0]] += 1
        country = event.location.country if event.location else None
        countries[country or "Unknown"] += 1
        severities[classify_severity(event.action).value] += 1
        actors[event.actor.name or event.actor.email or "Unknown"] += 1
        hours[event.time.hour] += 1

    return EventSummary(
        total=total,
        by_action=dict(actions),
        by_country=dict(countries),
        by_hour=hours,
        by_severity=dict(severities),
        top_actors=actors.most_common(top),
    )
