"""Tests for relay wiring."""

import logging

from relaybot.admission import AdmissionMode
from relaybot.config import RelaySettings
from relaybot.main import build_relay


class TestBuildRelay:
    def test_returns_admission_config(self, transport):
        settings = RelaySettings(_env_file=None, response_mode="command_only", admin_numbers="+1 555 0100")
        handler, broadcast, admission = build_relay(settings, transport)

        assert admission.mode is AdmissionMode.COMMAND_ONLY
        assert admission.allow_list == ("15550100",)
        assert handler.policy.config is admission
        assert broadcast.recipients == ["+1 555 0100"]

    def test_unknown_mode_warns_once(self, transport, caplog):
        settings = RelaySettings(_env_file=None, response_mode="everybody")

        with caplog.at_level(logging.WARNING, logger="relaybot.admission"):
            _, _, admission = build_relay(settings, transport)

        assert admission.mode is AdmissionMode.ADMIN_ONLY
        assert caplog.text.count("Unknown response mode") == 1
