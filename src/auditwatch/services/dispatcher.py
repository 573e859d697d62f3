"""Alert fan-out to every enabled channel.

Deliveries for one (event, rule) pair run concurrently and are isolated from
each other: a failing or hanging channel is logged and never stops the rest.
No retries, no queueing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping

from auditwatch_common import AlertChannel, AlertRule, AuditEvent, ChannelType

from auditwatch.errors import ChannelConfigError
from auditwatch.services.transports import Alert, ChannelTransport

log = logging.getLogger(__name__)


class AlertDispatcher:
    def __init__(
        self,
        transports: Mapping[ChannelType, ChannelTransport],
        *,
        timeout: float = 10.0,
    ) -> None:
        self.transports = dict(transports)
        self.timeout = timeout

    async def dispatch(
        self,
        event: AuditEvent,
        rule: AlertRule,
        channels: Iterable[AlertChannel],
    ) -> None:
        """Deliver one alert to all enabled channels and wait for every attempt."""
        targets = [channel for channel in channels if channel.enabled]
        if not targets:
            return
        alert = Alert(event=event, rule=rule)
        await asyncio.gather(*(self._deliver(alert, channel) for channel in targets))

    async def _deliver(self, alert: Alert, channel: AlertChannel) -> None:
        try:
            transport = self.transports.get(channel.type)
            if transport is None:
                raise ChannelConfigError(f"no transport for channel type {channel.type.value!r}")
            await asyncio.wait_for(transport.send(alert, channel.configuration), self.timeout)
        except asyncio.TimeoutError:
            log.error(
                "Failed to send %s alert via %r: timed out after %.1fs (event %s)",
                channel.type.value, channel.name, self.timeout, alert.event.id,
            )
        except Exception as exc:
            log.error(
                "Failed to send %s alert via %r: %s (event %s)",
                channel.type.value, channel.name, exc, alert.event.id,
            )
        else:
            log.info(
                "Sent %s alert via %r for %s (event %s)",
                channel.type.value, channel.name, alert.event.action, alert.event.id,
            )
