"""Tests for the relaybot CLI."""

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from relaybot.cli import cli


def test_help_lists_commands():
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 0
    for name in ("start", "status", "auth", "classify"):
        assert name in result.output


def test_classify_weather():
    result = CliRunner().invoke(cli, ["classify", "/weather", "Tokyo"])
    assert result.exit_code == 0
    assert "weather" in result.output
    assert "'Tokyo'" in result.output


def test_classify_help_has_no_fields():
    result = CliRunner().invoke(cli, ["classify", "/help"])
    assert result.exit_code == 0
    assert result.output.strip() == "help"


def test_start_configures_logging_before_settings_warnings():
    calls = []
    with patch("relaybot.main.configure_logging", side_effect=lambda *a, **k: calls.append("logging")), \
            patch("relaybot.config.check_settings", side_effect=lambda s: calls.append("check")), \
            patch("relaybot.main.run", AsyncMock()) as run:
        result = CliRunner().invoke(cli, ["start"])

    assert result.exit_code == 0
    assert calls == ["logging", "check"]
    run.assert_awaited_once()
