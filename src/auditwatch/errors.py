"""Custom exceptions for auditwatch."""

from __future__ import annotations


class AuditwatchError(Exception):
    """Base exception for all auditwatch operations."""

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class StoreError(AuditwatchError):
    """A durable write failed; nothing was made visible."""


class NotFoundError(AuditwatchError):
    """Requested rule or channel does not exist."""


class NotConfiguredError(AuditwatchError):
    """Event source settings have not been saved yet."""


class SourceError(AuditwatchError):
    """Polling the upstream events stream failed."""


class ChannelConfigError(AuditwatchError):
    """A channel's configuration cannot be used for delivery."""


class ChannelDeliveryError(AuditwatchError):
    """A channel endpoint rejected or failed the delivery."""
