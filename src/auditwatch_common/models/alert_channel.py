"""Alert channel model — one configured delivery destination.

The ``configuration`` shape depends on the channel type and is validated when
the channel is built, so a channel that was saved can always be dispatched to.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator


class ChannelType(str, Enum):
    CHAT = "chat"
    TICKETING = "ticketing"
    SIEM = "siem"


class ChannelStatus(str, Enum):
    """Last known result of a connection test."""

    UNTESTED = "untested"
    CONNECTED = "connected"
    FAILED = "failed"


class ChatConfig(BaseModel):
    type: Literal["chat"] = "chat"
    webhook_url: str = Field(min_length=1)
    channel: str | None = None


class TicketingConfig(BaseModel):
    type: Literal["ticketing"] = "ticketing"
    url: str = Field(min_length=1)
    project: str = Field(min_length=1)
    email: str = Field(min_length=1)
    api_token: str = Field(min_length=1)
    issue_type: str = "Task"


class SiemConfig(BaseModel):
    type: Literal["siem"] = "siem"
    endpoint: str = Field(min_length=1)
    api_key: str = Field(min_length=1)


ChannelConfig = Annotated[
    Union[ChatConfig, TicketingConfig, SiemConfig],
    Field(discriminator="type"),
]

_SECRET_FIELDS = {"api_token", "api_key"}


class AlertChannel(BaseModel):
    id: int | None = None
    type: ChannelType
    name: str = Field(min_length=1)
    configuration: ChannelConfig
    enabled: bool = True
    status: ChannelStatus = ChannelStatus.UNTESTED

    @model_validator(mode="before")
    @classmethod
    def _tag_configuration(cls, data: Any) -> Any:
        # Callers usually send the configuration without its own "type" key.
        if isinstance(data, dict):
            config = data.get("configuration")
            if isinstance(config, dict) and "type" not in config and "type" in data:
                kind = ChannelType(data["type"]).value
                data = {**data, "configuration": {**config, "type": kind}}
        return data

    @model_validator(mode="after")
    def _check_configuration_type(self) -> AlertChannel:
        if self.configuration.type != self.type.value:
            raise ValueError(
                f"configuration is for {self.configuration.type!r}, "
                f"channel type is {self.type.value!r}"
            )
        return self

    def redacted(self) -> dict[str, Any]:
        """Dump for display with secrets masked."""
        data = self.model_dump(mode="json")
        for key in _SECRET_FIELDS & data["configuration"].keys():
            value = data["configuration"][key]
            data["configuration"][key] = value[:4] + "..." if value else value
        return data
