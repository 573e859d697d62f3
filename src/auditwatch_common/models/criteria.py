"""Event filter criteria and upstream source settings."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auditwatch_common.constants import ATLASSIAN_BASE_URL


class EventCriteria(BaseModel):
    """Optional narrowing applied to a list of events. Empty fields match all."""

    model_config = ConfigDict(populate_by_name=True)

    action: str | None = None
    actor: list[str] = Field(default_factory=list)
    start: datetime | None = Field(default=None, alias="from")
    end: datetime | None = Field(default=None, alias="to")
    ip: list[str] = Field(default_factory=list)

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SourceSettings(BaseModel):
    """Credentials for the organization events-stream API."""

    api_key: str = Field(min_length=1)
    org_id: str = Field(min_length=1)
    base_url: str = Field(default=ATLASSIAN_BASE_URL, min_length=1)
