"""Audit event model for the organization events stream."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator


class Actor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    email: str = ""


class EventContext(BaseModel):
    """An object the audited action touched (user, group, policy...)."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    type: str = ""
    attributes: dict[str, JsonValue] = Field(default_factory=dict)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ip: str
    country: str | None = Field(default=None, alias="countryName")
    city: str | None = None


class AuditEvent(BaseModel):
    """A single audited administrative operation. Never mutated after ingest."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "events"
    time: datetime
    action: str
    actor: Actor = Field(default_factory=Actor)
    context: list[EventContext] = Field(default_factory=list)
    location: Location | None = None

    @field_validator("time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> AuditEvent:
        """Parse the upstream wire shape, where fields sit under ``attributes``."""
        attributes = payload.get("attributes") or {}
        return cls(
            id=payload["id"],
            type=payload.get("type", "events"),
            time=attributes["time"],
            action=attributes["action"],
            actor=attributes.get("actor") or {},
            context=attributes.get("context") or [],
            location=attributes.get("location"),
        )

    def to_api(self) -> dict[str, Any]:
        """Render back to the upstream wire shape."""
        attributes = self.model_dump(
            mode="json", by_alias=True, exclude={"id", "type"}, exclude_none=True
        )
        return {"id": self.id, "type": self.type, "attributes": attributes}
