"""Tests for the admission policy."""

import logging

import pytest

from relaybot.admission import (
    AdmissionConfig,
    AdmissionMode,
    AdmissionPolicy,
    clean_allow_list,
    decide,
)
from relaybot.communication.inbound import InboundMessage


def _msg(sender="15550100@c.us", text="hello", from_self=False, group=False):
    return InboundMessage(sender_id=sender, text=text, is_from_self=from_self, is_group=group)


ALL_MODES = list(AdmissionMode) + ["bogus_mode"]


class TestUniversalRejections:
    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_group_rejected_under_every_mode(self, mode):
        msg = _msg(sender="120363000000@g.us", text="/help", group=True)
        assert decide(msg, mode, ["120363000000"]) is False

    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_group_suffix_rejected_even_without_flag(self, mode):
        msg = _msg(sender="120363000000@g.us", text="/help")
        assert decide(msg, mode, ["120363000000"]) is False

    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_self_rejected_under_every_mode(self, mode):
        msg = _msg(text="/help", from_self=True)
        assert decide(msg, mode, ["15550100"]) is False


class TestAdminOnly:
    def test_digit_substring_match(self):
        assert decide(_msg("15550100@c.us"), AdmissionMode.ADMIN_ONLY, ["+1 555-0100"]) is True

    def test_non_matching_number(self):
        assert decide(_msg("15550199@c.us"), AdmissionMode.ADMIN_ONLY, ["+1 555-0100"]) is False

    def test_empty_allow_list(self):
        assert decide(_msg(), AdmissionMode.ADMIN_ONLY, []) is False

    def test_entry_without_digits_never_matches(self):
        assert decide(_msg(), AdmissionMode.ADMIN_ONLY, ["", "  ", "n/a"]) is False

    def test_any_entry_matches(self):
        allow = ["+44 7700 900123", "+1 (555) 0100"]
        assert decide(_msg("15550100@c.us"), AdmissionMode.ADMIN_ONLY, allow) is True

    def test_text_irrelevant(self):
        assert decide(_msg(text="/help"), AdmissionMode.ADMIN_ONLY, ["+99 999"]) is False


class TestCommandOnly:
    def test_help_from_anyone(self):
        msg = _msg("447700900999@c.us", text="/help")
        assert decide(msg, AdmissionMode.COMMAND_ONLY, []) is True

    def test_plain_text_rejected(self):
        assert decide(_msg(text="hello"), AdmissionMode.COMMAND_ONLY, ["15550100"]) is False

    def test_trimmed_and_case_insensitive(self):
        assert decide(_msg(text="  /Weather Oslo"), AdmissionMode.COMMAND_ONLY, []) is True


class TestDirectOnly:
    def test_direct_contact_accepted(self):
        assert decide(_msg("447700900999@c.us"), AdmissionMode.DIRECT_ONLY, []) is True

    def test_mode_string(self):
        assert decide(_msg(), "direct_messages_only", []) is True


class TestAll:
    def test_accepts_everyone(self):
        assert decide(_msg("447700900999@c.us", text="hi"), AdmissionMode.ALL, []) is True


class TestUnknownMode:
    def test_falls_back_to_admin_only(self, caplog):
        with caplog.at_level(logging.WARNING, logger="relaybot.admission"):
            assert decide(_msg("15550100@c.us"), "everyone", ["+1 555-0100"]) is True
            assert decide(_msg("15550199@c.us"), "everyone", ["+1 555-0100"]) is False
        assert "Unknown response mode" in caplog.text

    def test_never_permits_all(self):
        assert decide(_msg("447700900999@c.us"), "ALL_THE_THINGS", []) is False

    def test_repeated_misconfiguration_does_not_recurse(self):
        for _ in range(1000):
            assert decide(_msg(), "nope", []) is False


class TestModeParsing:
    @pytest.mark.parametrize("raw,expected", [
        ("admin_only", AdmissionMode.ADMIN_ONLY),
        ("COMMAND_ONLY", AdmissionMode.COMMAND_ONLY),
        ("direct_messages_only", AdmissionMode.DIRECT_ONLY),
        ("direct_only", AdmissionMode.DIRECT_ONLY),
        (" all ", AdmissionMode.ALL),
    ])
    def test_parse(self, raw, expected):
        assert AdmissionMode.parse(raw) is expected

    def test_parse_unknown(self):
        assert AdmissionMode.parse("whatever") is None

    def test_from_config_defaults_to_admin_only(self, caplog):
        with caplog.at_level(logging.WARNING, logger="relaybot.admission"):
            assert AdmissionMode.from_config("whatever") is AdmissionMode.ADMIN_ONLY
        assert "defaulting to admin_only" in caplog.text


class TestAllowList:
    def test_clean_keeps_digits_and_order(self):
        assert clean_allow_list(["+1 555-0100", "", "+44 (7700) 900123", "+1 555 0100"]) == (
            "15550100",
            "447700900123",
        )


class TestPolicy:
    def test_bound_config(self):
        policy = AdmissionPolicy(AdmissionConfig(AdmissionMode.ADMIN_ONLY, ("15550100",)))
        assert policy.allows(_msg("15550100@c.us")) is True
        assert policy.allows(_msg("15550199@c.us")) is False
