"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from auditwatch_common import Actor, AuditEvent, AuditwatchConfig, Location

from auditwatch.services.store import DurableStore


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _make_event(
    event_id: str = "evt-1",
    action: str = "user.login",
    *,
    name: str = "Alice Admin",
    email: str = "alice@example.com",
    ip: str | None = "203.0.113.7",
    country: str | None = "US",
    time: datetime | None = None,
) -> AuditEvent:
    return AuditEvent(
        id=event_id,
        time=time or datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
        action=action,
        actor=Actor(id=f"acc-{name.split()[0].lower()}", name=name, email=email),
        location=Location(ip=ip, country=country) if ip is not None else None,
    )


@pytest.fixture
def tmp_config(tmp_path: Path) -> AuditwatchConfig:
    """Return an AuditwatchConfig pointing at a temp data directory."""
    return AuditwatchConfig(
        data_dir=tmp_path / "data",
        database_url_override=None,
        log_level="DEBUG",
        delivery_timeout=2.0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_event():
    return _make_event


@pytest.fixture
async def store(tmp_config: AuditwatchConfig, clock: FakeClock):
    """A started DurableStore on a temp SQLite file, closed after the test."""
    durable = DurableStore(tmp_config.database_url, shadow_ttl=60, clock=clock)
    await durable.init()
    yield durable
    await durable.close()
