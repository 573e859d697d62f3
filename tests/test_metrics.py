"""Tests for event summaries."""

from __future__ import annotations

from datetime import datetime, timezone

from auditwatch.services.metrics import summarize_events


class TestSummarizeEvents:
    def test_counts(self, make_event):
        events = [
            make_event("1", "user.login", time=datetime(2024, 3, 1, 9, tzinfo=timezone.utc)),
            make_event("2", "user.admin.privilege.granted", country="AU"),
            make_event("3", "group.created", name="Bob", ip=None),
        ]
        summary = summarize_events(events)
        assert summary.total == 3
        assert summary.by_action == {"user": 2, "group": 1}
        assert summary.by_country == {"US": 1, "AU": 1, "Unknown": 1}
        assert summary.by_severity == {"medium": 1, "high": 1, "low": 1}
        assert summary.by_hour[9] == 1 and summary.by_hour[12] == 2
        assert summary.top_actors[0] == ("Alice Admin", 2)

    def test_empty(self):
        summary = summarize_events([])
        assert summary.total == 0
        assert summary.by_hour == [0] * 24
