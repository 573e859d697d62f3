"""Central configuration for auditwatch tools."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from auditwatch_common.constants import (
    API_CACHE_TTL,
    DATA_DIR,
    DATABASE_FILENAME,
    DEFAULT_MAX_EVENTS,
    DEFAULT_POLL_LIMIT,
    DEFAULT_RETENTION_DAYS,
)


def _env(name: str, default: str) -> str:
    return os.environ.get(f"AUDITWATCH_{name}", default)


class AuditwatchConfig(BaseModel):
    """Runtime configuration resolved once at startup."""

    data_dir: Path = Field(default_factory=lambda: Path(_env("DATA_DIR", str(DATA_DIR))))
    database_url_override: str | None = Field(
        default_factory=lambda: os.environ.get("AUDITWATCH_DATABASE_URL")
    )
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    cache_default_ttl: int = Field(default=API_CACHE_TTL, gt=0)
    cache_sweep_interval: float = Field(
        default_factory=lambda: float(_env("CACHE_SWEEP_INTERVAL", "300")), gt=0
    )
    store_cleanup_interval: float = Field(
        default_factory=lambda: float(_env("STORE_CLEANUP_INTERVAL", "3600")), gt=0
    )
    shadow_ttl: int = Field(default=300, gt=0)

    delivery_timeout: float = Field(
        default_factory=lambda: float(_env("DELIVERY_TIMEOUT", "10")), gt=0
    )
    http_timeout: float = Field(default=30.0, gt=0)

    event_retention_days: int = Field(
        default_factory=lambda: int(_env("EVENT_RETENTION_DAYS", str(DEFAULT_RETENTION_DAYS))),
        gt=0,
    )
    max_events: int = Field(default=DEFAULT_MAX_EVENTS, gt=0)
    poll_interval: float = Field(
        default_factory=lambda: float(_env("POLL_INTERVAL", "60")), gt=0
    )
    poll_limit: int = Field(default=DEFAULT_POLL_LIMIT, gt=0)

    @property
    def database_path(self) -> Path:
        return self.data_dir / DATABASE_FILENAME

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"sqlite+aiosqlite:///{self.database_path}"

    @property
    def event_ttl(self) -> int:
        return self.event_retention_days * 24 * 3600
