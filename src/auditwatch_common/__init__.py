"""auditwatch common — shared models and constants for the CLI and API."""

from auditwatch_common.config import AuditwatchConfig
from auditwatch_common.constants import (
    CHANNELS_COLLECTION,
    EVENTS_COLLECTION,
    RULES_COLLECTION,
)
from auditwatch_common.models import (
    Actor,
    AlertChannel,
    AlertRule,
    AuditEvent,
    ChannelStatus,
    ChannelType,
    EventContext,
    EventCriteria,
    Location,
    Severity,
    SourceSettings,
)

__all__ = [
    "Actor",
    "AlertChannel",
    "AlertRule",
    "AuditEvent",
    "AuditwatchConfig",
    "CHANNELS_COLLECTION",
    "ChannelStatus",
    "ChannelType",
    "EVENTS_COLLECTION",
    "EventContext",
    "EventCriteria",
    "Location",
    "RULES_COLLECTION",
    "Severity",
    "SourceSettings",
]
