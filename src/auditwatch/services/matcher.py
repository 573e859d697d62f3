"""Rule matching and the default severity heuristic."""

from __future__ import annotations

from typing import Iterable

from auditwatch_common import AlertRule, AuditEvent, Severity

_HIGH_MARKERS = ("admin.privilege", "policy", "suspended")
_MEDIUM_MARKERS = ("failed", "login", "domain")


def rule_matches(event: AuditEvent, rule: AlertRule) -> bool:
    return rule.enabled and rule.action_pattern in event.action


def match_rules(event: AuditEvent, rules: Iterable[AlertRule]) -> list[AlertRule]:
    """Every enabled rule whose pattern occurs in the event action, in rule order."""
    return [rule for rule in rules if rule_matches(event, rule)]


def classify_severity(action: str) -> Severity:
    """Guess a severity from the action alone. Configured rules take precedence."""
    if any(marker in action for marker in _HIGH_MARKERS):
        return Severity.HIGH
    if any(marker in action for marker in _MEDIUM_MARKERS):
        return Severity.MEDIUM
    return Severity.LOW
