"""Tests for the shared models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from auditwatch_common import AlertChannel, AlertRule, AuditEvent, ChannelType, EventCriteria, Severity
from auditwatch_common.models import ChatConfig, SiemConfig, TicketingConfig

API_EVENT = {
    "id": "a1b2c3",
    "type": "events",
    "attributes": {
        "time": "2024-03-01T12:30:00.000Z",
        "action": "user_granted_admin_privilege",
        "actor": {"id": "acc-1", "name": "Alice Admin", "email": "alice@example.com"},
        "context": [
            {"id": "g-1", "type": "group", "attributes": {"name": "site-admins", "size": 3}}
        ],
        "location": {"ip": "203.0.113.7", "countryName": "Australia", "city": "Sydney"},
    },
}


class TestAuditEvent:
    def test_from_api(self):
        event = AuditEvent.from_api(API_EVENT)
        assert event.id == "a1b2c3"
        assert event.action == "user_granted_admin_privilege"
        assert event.time == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert event.actor.email == "alice@example.com"
        assert event.context[0].attributes == {"name": "site-admins", "size": 3}
        assert event.location.country == "Australia"

    def test_to_api_restores_wire_shape(self):
        event = AuditEvent.from_api(API_EVENT)
        wire = event.to_api()
        assert wire["id"] == "a1b2c3"
        assert wire["attributes"]["location"]["countryName"] == "Australia"
        assert wire["attributes"]["actor"]["name"] == "Alice Admin"

    def test_missing_location_is_allowed(self):
        payload = {"id": "x", "attributes": {"time": "2024-03-01T00:00:00Z", "action": "user.login"}}
        event = AuditEvent.from_api(payload)
        assert event.location is None
        assert event.actor.name == ""

    def test_naive_time_is_utc(self):
        event = AuditEvent(id="x", time=datetime(2024, 1, 1), action="a")
        assert event.time.tzinfo is timezone.utc

    def test_events_are_immutable(self, make_event):
        event = make_event()
        with pytest.raises(ValidationError):
            event.action = "changed"

    def test_missing_action_rejected(self):
        with pytest.raises(KeyError):
            AuditEvent.from_api({"id": "x", "attributes": {"time": "2024-03-01T00:00:00Z"}})


class TestAlertRule:
    def test_defaults(self):
        rule = AlertRule(name="Admin grants", action_pattern="admin.privilege")
        assert rule.severity is Severity.MEDIUM
        assert rule.enabled is True
        assert rule.id is None

    def test_empty_pattern_rejected(self):
        with pytest.raises(ValidationError):
            AlertRule(name="Everything", action_pattern="")


class TestAlertChannel:
    def test_configuration_tagged_from_channel_type(self):
        channel = AlertChannel(
            type="chat", name="Security room", configuration={"webhook_url": "https://hooks/x"}
        )
        assert isinstance(channel.configuration, ChatConfig)
        assert channel.type is ChannelType.CHAT

    def test_ticketing_requires_credentials(self):
        with pytest.raises(ValidationError):
            AlertChannel(
                type="ticketing",
                name="Jira",
                configuration={"url": "https://acme.atlassian.net", "project": "SEC"},
            )

    def test_ticketing_issue_type_default(self):
        channel = AlertChannel(
            type=ChannelType.TICKETING,
            name="Jira",
            configuration={
                "url": "https://acme.atlassian.net",
                "project": "SEC",
                "email": "bot@acme.test",
                "api_token": "tok-123456",
            },
        )
        assert isinstance(channel.configuration, TicketingConfig)
        assert channel.configuration.issue_type == "Task"

    def test_mismatched_configuration_rejected(self):
        with pytest.raises(ValidationError):
            AlertChannel(
                type="chat",
                name="Wrong",
                configuration={"type": "siem", "endpoint": "https://siem", "api_key": "k"},
            )

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            AlertChannel(type="pager", name="x", configuration={})

    def test_redacted_masks_secrets(self):
        channel = AlertChannel(
            type="siem",
            name="SIEM",
            configuration={"endpoint": "https://siem.test/ingest", "api_key": "secret-key"},
        )
        assert isinstance(channel.configuration, SiemConfig)
        shown = channel.redacted()
        assert shown["configuration"]["api_key"] == "secr..."
        assert shown["configuration"]["endpoint"] == "https://siem.test/ingest"

    def test_round_trips_through_json(self):
        channel = AlertChannel(
            type="chat", name="Room", configuration={"webhook_url": "https://hooks/x"}
        )
        again = AlertChannel.model_validate(channel.model_dump(mode="json"))
        assert again == channel


class TestEventCriteria:
    def test_aliases(self):
        criteria = EventCriteria.model_validate({"from": "2024-01-01T00:00:00", "to": "2024-02-01T00:00:00Z"})
        assert criteria.start.tzinfo is timezone.utc
        assert criteria.end == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_empty_by_default(self):
        criteria = EventCriteria()
        assert criteria.actor == [] and criteria.ip == [] and criteria.action is None
