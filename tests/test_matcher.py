"""Tests for rule matching and the severity heuristic."""

from __future__ import annotations

import pytest

from auditwatch_common import AlertRule, Severity

from auditwatch.services.matcher import classify_severity, match_rules, rule_matches


def _rule(pattern: str, *, enabled: bool = True, name: str | None = None) -> AlertRule:
    return AlertRule(name=name or pattern, action_pattern=pattern, enabled=enabled)


class TestRuleMatches:
    @pytest.mark.parametrize(
        "pattern,enabled,expected",
        [
            ("admin.privilege", True, True),
            ("privilege", True, True),
            ("admin.privilege", False, False),
            ("group.created", True, False),
            ("ADMIN", True, False),  # case sensitive
        ],
    )
    def test_substring_and_enabled(self, make_event, pattern, enabled, expected):
        event = make_event(action="user.admin.privilege.granted")
        assert rule_matches(event, _rule(pattern, enabled=enabled)) is expected
        assert bool(match_rules(event, [_rule(pattern, enabled=enabled)])) is expected


class TestMatchRules:
    def test_all_matching_rules_in_rule_order(self, make_event):
        event = make_event(action="user.login.failed")
        rules = [_rule("failed", name="b"), _rule("user", name="a"), _rule("group", name="c")]
        assert [r.name for r in match_rules(event, rules)] == ["b", "a"]

    def test_disabled_rules_skipped(self, make_event):
        event = make_event(action="user.login.failed")
        rules = [_rule("login", enabled=False), _rule("failed")]
        assert [r.action_pattern for r in match_rules(event, rules)] == ["failed"]

    def test_no_rules(self, make_event):
        assert match_rules(make_event(), []) == []


class TestClassifySeverity:
    @pytest.mark.parametrize(
        "action,expected",
        [
            ("user.admin.privilege.granted", Severity.HIGH),
            ("auth_policy_updated", Severity.HIGH),
            ("user.suspended", Severity.HIGH),
            ("user.login.failed", Severity.MEDIUM),
            ("user.login", Severity.MEDIUM),
            ("domain.verified", Severity.MEDIUM),
            ("group.created", Severity.LOW),
        ],
    )
    def test_heuristic(self, action, expected):
        assert classify_severity(action) is expected

    def test_independent_of_rule_severity(self, make_event):
        rule = AlertRule(name="r", action_pattern="group", severity=Severity.HIGH)
        event = make_event(action="group.created")
        assert match_rules(event, [rule])[0].severity is Severity.HIGH
        assert classify_severity(event.action) is Severity.LOW
