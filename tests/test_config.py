"""Tests for settings loading."""

import logging

import pydantic
import pytest

from relaybot.admission import AdmissionMode
from relaybot.config import RelaySettings, load_settings, split_list


def test_defaults():
    settings = RelaySettings(_env_file=None)
    assert settings.response_mode == "admin_only"
    assert settings.port == 3000
    assert settings.bot_name == "WhatsApp API Bot"
    assert settings.send_welcome_to_self is False
    assert settings.admin_list == []


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("RELAY_RESPONSE_MODE", "command_only")
    monkeypatch.setenv("RELAY_ADMIN_NUMBERS", "+1 555-0100, +44 7700 900123,")
    monkeypatch.setenv("RELAY_SEND_WELCOME_TO_SELF", "true")
    monkeypatch.setenv("RELAY_PORT", "8080")

    settings = RelaySettings(_env_file=None)
    assert settings.admin_list == ["+1 555-0100", "+44 7700 900123"]
    assert settings.send_welcome_to_self is True
    assert settings.port == 8080

    config = settings.admission_config()
    assert config.mode is AdmissionMode.COMMAND_ONLY
    assert config.allow_list == ("15550100", "447700900123")


def test_unknown_mode_degrades_to_admin_only(caplog):
    settings = RelaySettings(_env_file=None, response_mode="everybody")
    with caplog.at_level(logging.WARNING, logger="relaybot.admission"):
        assert settings.admission_config().mode is AdmissionMode.ADMIN_ONLY
    assert "everybody" in caplog.text


def test_broadcast_defaults_to_admins():
    settings = RelaySettings(_env_file=None, admin_numbers="+15550100123")
    assert settings.broadcast_list == ["+15550100123"]

    settings = RelaySettings(_env_file=None, admin_numbers="+15550100123", broadcast_numbers="+447700900123")
    assert settings.broadcast_list == ["+447700900123"]


def test_settings_are_frozen():
    settings = RelaySettings(_env_file=None)
    with pytest.raises(pydantic.ValidationError):
        settings.response_mode = "all"


def test_load_settings_warns_on_empty_admin_list(monkeypatch, caplog):
    monkeypatch.chdir("/")  # no stray .env
    with caplog.at_level(logging.WARNING, logger="relaybot.config"):
        load_settings()
    assert "RELAY_ADMIN_NUMBERS is empty" in caplog.text
    assert "RELAY_API_URL is not set" in caplog.text


def test_split_list():
    assert split_list(None) == []
    assert split_list(" a, ,b ,") == ["a", "b"]
