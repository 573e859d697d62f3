"""Tests for the event filter."""

from __future__ import annotations

from datetime import datetime, timezone

from auditwatch_common import EventCriteria

from auditwatch.services.event_filter import filter_events, matches


class TestMatches:
    def test_and_composition(self, make_event):
        event = make_event(action="user.login.failed", email="x@y.com", ip="10.0.0.1")
        assert matches(event, EventCriteria(action="login", ip=["10.0.0.1"]))
        assert not matches(event, EventCriteria(action="login", ip=["9.9.9.9"]))

    def test_empty_criteria_match_everything(self, make_event):
        assert matches(make_event(ip=None), EventCriteria())

    def test_actor_any_token_name_or_email(self, make_event):
        event = make_event(name="Bob Builder", email="bob@corp.test")
        assert matches(event, EventCriteria(actor=["nobody", "Builder"]))
        assert matches(event, EventCriteria(actor=["corp.test"]))
        assert not matches(event, EventCriteria(actor=["alice"]))

    def test_time_bounds_inclusive(self, make_event):
        at = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        event = make_event(time=at)
        assert matches(event, EventCriteria(start=at, end=at))
        assert not matches(event, EventCriteria(start=datetime(2024, 3, 2, tzinfo=timezone.utc)))
        assert not matches(event, EventCriteria(end=datetime(2024, 2, 1, tzinfo=timezone.utc)))

    def test_ip_requires_location(self, make_event):
        assert not matches(make_event(ip=None), EventCriteria(ip=["10."]))

    def test_ip_substring(self, make_event):
        assert matches(make_event(ip="10.0.0.1"), EventCriteria(ip=["10.0."]))


class TestFilterEvents:
    def test_keeps_order(self, make_event):
        events = [
            make_event("1", "user.login"),
            make_event("2", "group.created"),
            make_event("3", "user.login.failed"),
        ]
        result = filter_events(events, EventCriteria(action="login"))
        assert [e.id for e in result] == ["1", "3"]
