"""Shared Pydantic models."""

from auditwatch_common.models.alert_channel import (
    AlertChannel,
    ChannelConfig,
    ChannelStatus,
    ChannelType,
    ChatConfig,
    SiemConfig,
    TicketingConfig,
)
from auditwatch_common.models.alert_rule import AlertRule, Severity
from auditwatch_common.models.audit_event import Actor, AuditEvent, EventContext, Location
from auditwatch_common.models.criteria import EventCriteria, SourceSettings

__all__ = [
    "Actor",
    "AlertChannel",
    "AlertRule",
    "AuditEvent",
    "ChannelConfig",
    "ChannelStatus",
    "ChannelType",
    "ChatConfig",
    "EventContext",
    "EventCriteria",
    "Location",
    "Severity",
    "SiemConfig",
    "SourceSettings",
    "TicketingConfig",
]
