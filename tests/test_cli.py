"""Tests for CLI entrypoint."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from vinrelay.cli import app

runner = CliRunner()


class TestCLI:
    """CLI command tests."""

    def test_cli_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "VIN Relay" in result.stdout

    def test_serve_help(self) -> None:
        result = runner.invoke(app, ["serve", "--help"])
        assert result.exit_code == 0
        assert "host" in result.stdout
        assert "port" in result.stdout

    def test_serve_runs_uvicorn_factory(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PORT", "9100")
        with patch("uvicorn.run") as mock_run:
            result = runner.invoke(app, ["serve", "--host", "0.0.0.0"])
        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args[0] == "vinrelay.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9100


class TestCheckVin:
    def test_valid(self) -> None:
        result = runner.invoke(app, ["check-vin", "1HGBH41JXMN109186"])
        assert result.exit_code == 0
        assert "1HGBH41JXMN109186: valid" in result.stdout

    def test_normalizes_like_the_form(self) -> None:
        result = runner.invoke(app, ["check-vin", "  1hgbh41jxmn109186 "])
        assert result.exit_code == 0
        assert "1HGBH41JXMN109186: valid" in result.stdout

    def test_invalid(self) -> None:
        result = runner.invoke(app, ["check-vin", "1HGBH41JXMN1O9186"])
        assert result.exit_code == 1


class TestShowConfig:
    def test_secrets_masked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENDGRID_API_KEY", "SG.do-not-print-me")
        monkeypatch.delenv("FROM_EMAIL", raising=False)
        monkeypatch.setenv("ALLOWED_ORIGINS", "https://dmmethevin.com")
        monkeypatch.setenv("METRICS_TOKEN", "scrape-token-do-not-print")
        result = runner.invoke(app, ["show-config"])
        assert result.exit_code == 0
        assert "SG.do-not-print-me" not in result.stdout
        assert "SendGrid API key: set" in result.stdout
        assert "Sender:           unset" in result.stdout
        assert "scrape-token-do-not-print" not in result.stdout
        assert "Metrics token:    set" in result.stdout
        assert "https://dmmethevin.com" in result.stdout
