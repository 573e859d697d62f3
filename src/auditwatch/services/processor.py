"""Batch processing of audit events against the configured rules."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from auditwatch_common import AlertChannel, AlertRule, AuditEvent

from auditwatch.services.dispatcher import AlertDispatcher
from auditwatch.services.matcher import match_rules

log = logging.getLogger(__name__)


class AuditProcessor:
    """Matches each event against the rules and dispatches every match."""

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        rules: Sequence[AlertRule],
        channels: Sequence[AlertChannel],
    ) -> None:
        self.dispatcher = dispatcher
        self.rules = [rule for rule in rules if rule.enabled]
        self.channels = [channel for channel in channels if channel.enabled]

    async def process_events(
        self, events: Iterable[AuditEvent]
    ) -> list[tuple[AuditEvent, AlertRule]]:
        """Process events in batch order. One event's failure never stops the rest."""
        matched: list[tuple[AuditEvent, AlertRule]] = []
        for event in events:
            try:
                rules = await self.process_event(event)
            except Exception as exc:
                log.error("Processing event %s failed: %s", event.id, exc)
                continue
            matched.extend((event, rule) for rule in rules)
        return matched

    async def process_event(self, event: AuditEvent) -> list[AlertRule]:
        rules = match_rules(event, self.rules)
        for rule in rules:
            log.debug("Event %s (%s) matched rule %r", event.id, event.action, rule.name)
            await self.dispatcher.dispatch(event, rule, self.channels)
        return rules
