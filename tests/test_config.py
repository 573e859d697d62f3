"""Tests for AuditwatchConfig."""

from __future__ import annotations

from pathlib import Path

from auditwatch_common import AuditwatchConfig


class TestAuditwatchConfig:
    def test_database_url_under_data_dir(self, tmp_config: AuditwatchConfig):
        assert tmp_config.database_path == tmp_config.data_dir / "auditwatch.db"
        assert tmp_config.database_url == f"sqlite+aiosqlite:///{tmp_config.database_path}"

    def test_database_url_override(self, tmp_path: Path):
        cfg = AuditwatchConfig(data_dir=tmp_path, database_url_override="postgresql+asyncpg://x/y")
        assert cfg.database_url == "postgresql+asyncpg://x/y"

    def test_event_ttl(self, tmp_path: Path):
        cfg = AuditwatchConfig(data_dir=tmp_path, event_retention_days=2)
        assert cfg.event_ttl == 2 * 24 * 3600

    def test_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("AUDITWATCH_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("AUDITWATCH_POLL_INTERVAL", "15")
        monkeypatch.setenv("AUDITWATCH_EVENT_RETENTION_DAYS", "30")
        monkeypatch.setenv("AUDITWATCH_DATABASE_URL", "sqlite+aiosqlite:///elsewhere.db")
        cfg = AuditwatchConfig()
        assert cfg.data_dir == tmp_path
        assert cfg.poll_interval == 15
        assert cfg.event_retention_days == 30
        assert cfg.database_url == "sqlite+aiosqlite:///elsewhere.db"
