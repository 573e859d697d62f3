"""Tests for the typer CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from auditwatch.cli import app
from auditwatch.config import get_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("AUDITWATCH_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("AUDITWATCH_DATABASE_URL", raising=False)
    monkeypatch.setattr("auditwatch.cli.configure_logging", lambda level: None)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


class TestRules:
    def test_add_and_list(self):
        result = runner.invoke(app, ["rules", "add", "--name", "Admin", "--pattern", "admin.privilege"])
        assert result.exit_code == 0, result.output
        assert "Rule 1 saved" in result.output
        assert "high" in result.output  # guessed from the pattern

        result = runner.invoke(app, ["rules", "list"])
        assert result.exit_code == 0
        assert "Admin" in result.output

    def test_disable(self):
        runner.invoke(app, ["rules", "add", "--name", "Logins", "--pattern", "login"])
        result = runner.invoke(app, ["rules", "disable", "1"])
        assert result.exit_code == 0
        assert "disabled" in result.output

    def test_remove_missing(self):
        result = runner.invoke(app, ["rules", "remove", "7"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_enable_missing(self):
        result = runner.invoke(app, ["rules", "enable", "7"])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestChannels:
    def test_add_chat(self):
        result = runner.invoke(
            app, ["channels", "add-chat", "--name", "Room", "--webhook-url", "https://hooks.test/x"]
        )
        assert result.exit_code == 0, result.output
        assert "Channel 1 saved" in result.output

        result = runner.invoke(app, ["channels", "list"])
        assert "Room" in result.output
        assert "untested" in result.output

    def test_add_siem_prompts_for_key(self):
        result = runner.invoke(
            app,
            ["channels", "add-siem", "--name", "SIEM", "--endpoint", "https://siem.test"],
            input="secret-key\n",
        )
        assert result.exit_code == 0, result.output
        assert "Channel 1 saved" in result.output


class TestSetupAndEvents:
    def test_setup_save_and_show(self):
        result = runner.invoke(app, ["setup", "save", "--org-id", "org-1", "--api-key", "admin-key"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, ["setup", "show"])
        assert "org-1" in result.output
        assert "admin-key" not in result.output

    def test_poll_without_source(self):
        result = runner.invoke(app, ["events", "poll"])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_list_empty(self):
        result = runner.invoke(app, ["events", "list", "--action", "login"])
        assert result.exit_code == 0
        assert "No matching events" in result.output
