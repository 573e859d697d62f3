"""Channel transports — payload construction and HTTP delivery per channel type."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from auditwatch_common import AlertRule, AuditEvent, ChannelType, Severity
from auditwatch_common.constants import EVENT_SOURCE_NAME
from auditwatch_common.models import ChannelConfig, ChatConfig, SiemConfig, TicketingConfig

from auditwatch.errors import ChannelConfigError, ChannelDeliveryError

log = logging.getLogger(__name__)

_JIRA_PRIORITY = {
    Severity.HIGH: "High",
    Severity.MEDIUM: "Medium",
    Severity.LOW: "Low",
}


@dataclass(frozen=True)
class Alert:
    """One matched (event, rule) pair on its way to the channels."""

    event: AuditEvent
    rule: AlertRule

    @property
    def severity(self) -> Severity:
        return self.rule.severity

    @property
    def actor_label(self) -> str:
        actor = self.event.actor
        return f"{actor.name} ({actor.email})"

    @property
    def source_ip(self) -> str:
        return self.event.location.ip if self.event.location else "Unknown"

    @property
    def time_label(self) -> str:
        return self.event.time.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


# ---------------------------------------------------------------------------
# Payload builders (pure, testable)
# ---------------------------------------------------------------------------


def build_chat_message(alert: Alert, config: ChatConfig) -> dict[str, Any]:
    event = alert.event
    message: dict[str, Any] = {
        "text": f"Security Alert: {event.action}",
        "blocks": [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{alert.severity.value.upper()} Security Alert",
                },
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Action:* {event.action}"},
                    {"type": "mrkdwn", "text": f"*Actor:* {alert.actor_label}"},
                    {"type": "mrkdwn", "text": f"*Time:* {alert.time_label}"},
                    {"type": "mrkdwn", "text": f"*IP:* {alert.source_ip}"},
                ],
            },
            {
                "type": "context",
                "elements": [
                    {
                        "type": "mrkdwn",
                        "text": f"Event ID: {event.id} | Rule: {alert.rule.name}",
                    }
                ],
            },
        ],
    }
    if config.channel:
        message["channel"] = config.channel
    return message


def _paragraph(text: str, *, strong: bool = False) -> dict[str, Any]:
    node: dict[str, Any] = {"type": "text", "text": text}
    if strong:
        node["marks"] = [{"type": "strong"}]
    return {"type": "paragraph", "content": [node]}


def build_ticket(alert: Alert, config: TicketingConfig) -> dict[str, Any]:
    """Issue-creation body in Atlassian document format."""
    event = alert.event
    return {
        "fields": {
            "project": {"key": config.project},
            "summary": f"Security Alert: {event.action}",
            "description": {
                "type": "doc",
                "version": 1,
                "content": [
                    _paragraph(
                        f"A {alert.severity.value} severity security event matched "
                        f"rule '{alert.rule.name}'."
                    ),
                    _paragraph(f"Action: {event.action}", strong=True),
                    _paragraph(f"Actor: {alert.actor_label}"),
                    _paragraph(f"Time: {alert.time_label}"),
                    _paragraph(f"IP Address: {alert.source_ip}"),
                    _paragraph(f"Event ID: {event.id}"),
                ],
            },
            "issuetype": {"name": config.issue_type},
            "priority": {"name": _JIRA_PRIORITY[alert.severity]},
            "labels": ["security", "audit", "automated"],
        }
    }


def build_siem_event(alert: Alert, now: datetime | None = None) -> dict[str, Any]:
    event = alert.event
    now = now or datetime.now(timezone.utc)
    return {
        "timestamp": now.isoformat(),
        "source": EVENT_SOURCE_NAME,
        "severity": alert.severity.value,
        "event_type": "security_alert",
        "event_id": event.id,
        "event_time": event.time.isoformat(),
        "rule": alert.rule.name,
        "action": event.action,
        "actor": event.actor.model_dump(mode="json"),
        "location": event.location.model_dump(mode="json") if event.location else None,
        "context": [item.model_dump(mode="json") for item in event.context],
        "raw_event": event.to_api(),
    }


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


class ChannelTransport:
    """Delivers alerts for one channel type over a shared HTTP client."""

    channel_type: ChannelType
    config_class: type

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    def _config(self, config: ChannelConfig) -> Any:
        if not isinstance(config, self.config_class):
            raise ChannelConfigError(
                f"{self.channel_type.value} transport got a {config.type!r} configuration"
            )
        return config

    def _check(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise ChannelDeliveryError(
                f"{self.channel_type.value} endpoint returned {response.status_code}: "
                f"{response.text[:200]}"
            )

    async def send(self, alert: Alert, config: ChannelConfig) -> None:
        raise NotImplementedError

    async def test(self, config: ChannelConfig) -> None:
        """Raise if the channel cannot be reached with this configuration."""
        raise NotImplementedError


class ChatTransport(ChannelTransport):
    channel_type = ChannelType.CHAT
    config_class = ChatConfig

    async def send(self, alert: Alert, config: ChannelConfig) -> None:
        cfg = self._config(config)
        resp = await self.client.post(cfg.webhook_url, json=build_chat_message(alert, cfg))
        self._check(resp)

    async def test(self, config: ChannelConfig) -> None:
        cfg = self._config(config)
        message: dict[str, Any] = {"text": "Test message from auditwatch"}
        if cfg.channel:
            message["channel"] = cfg.channel
        resp = await self.client.post(cfg.webhook_url, json=message)
        self._check(resp)


class TicketingTransport(ChannelTransport):
    channel_type = ChannelType.TICKETING
    config_class = TicketingConfig

    async def send(self, alert: Alert, config: ChannelConfig) -> None:
        cfg = self._config(config)
        resp = await self.client.post(
            f"{cfg.url.rstrip('/')}/rest/api/3/issue",
            json=build_ticket(alert, cfg),
            auth=(cfg.email, cfg.api_token),
        )
        self._check(resp)
        try:
            issue_key = resp.json().get("key")
        except ValueError:
            issue_key = None
        if not issue_key:
            raise ChannelDeliveryError("ticketing endpoint returned no issue key")
        log.info("Created issue %s for event %s", issue_key, alert.event.id)

    async def test(self, config: ChannelConfig) -> None:
        cfg = self._config(config)
        resp = await self.client.get(
            f"{cfg.url.rstrip('/')}/rest/api/3/project/{cfg.project}",
            auth=(cfg.email, cfg.api_token),
            headers={"Accept": "application/json"},
        )
        self._check(resp)


class SiemTransport(ChannelTransport):
    channel_type = ChannelType.SIEM
    config_class = SiemConfig

    def _headers(self, cfg: SiemConfig) -> dict[str, str]:
        return {"Authorization": f"Bearer {cfg.api_key}", "X-Source": EVENT_SOURCE_NAME}

    async def send(self, alert: Alert, config: ChannelConfig) -> None:
        cfg = self._config(config)
        resp = await self.client.post(
            cfg.endpoint, json=build_siem_event(alert), headers=self._headers(cfg)
        )
        self._check(resp)

    async def test(self, config: ChannelConfig) -> None:
        cfg = self._config(config)
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": EVENT_SOURCE_NAME,
            "event_type": "connection_test",
            "severity": "info",
            "message": "SIEM connection test from auditwatch",
        }
        resp = await self.client.post(cfg.endpoint, json=payload, headers=self._headers(cfg))
        self._check(resp)


def default_transports(client: httpx.AsyncClient) -> dict[ChannelType, ChannelTransport]:
    return {
        ChannelType.CHAT: ChatTransport(client),
        ChannelType.TICKETING: TicketingTransport(client),
        ChannelType.SIEM: SiemTransport(client),
    }
