"""Alert rule model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertRule(BaseModel):
    """Raise an alert for every event whose action contains ``action_pattern``."""

    id: int | None = None
    name: str = Field(min_length=1)
    action_pattern: str = Field(min_length=1)
    severity: Severity = Severity.MEDIUM
    enabled: bool = True
