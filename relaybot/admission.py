"""Admission policy — decides whether an inbound message gets any reply.

Pure decision logic. The mode and allow-list are loaded once at startup
into an AdmissionConfig and passed in explicitly.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from .commands import is_command
from .communication.inbound import InboundMessage, digits_only, is_group_address, strip_suffix

logger = logging.getLogger("relaybot.admission")


class AdmissionMode(Enum):
    ADMIN_ONLY = "admin_only"
    COMMAND_ONLY = "command_only"
    DIRECT_ONLY = "direct_messages_only"
    ALL = "all"

    @classmethod
    def parse(cls, value) -> Optional["AdmissionMode"]:
        """Parse a configured mode string. Returns None if unrecognized."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key == "direct_only":
            return cls.DIRECT_ONLY
        for mode in cls:
            if mode.value == key:
                return mode
        return None

    @classmethod
    def from_config(cls, value) -> "AdmissionMode":
        """Parse a configured mode, falling back to ADMIN_ONLY when unknown."""
        mode = cls.parse(value)
        if mode is None:
            logger.warning(f"Unknown response mode: {value!r}, defaulting to admin_only")
            return cls.ADMIN_ONLY
        return mode


def clean_allow_list(entries: Iterable[str]) -> tuple[str, ...]:
    """Normalize allow-list entries to digits, dropping entries without any.

    An empty entry would match every sender as a substring.
    """
    cleaned = []
    for entry in entries:
        digits = digits_only(entry)
        if digits and digits not in cleaned:
            cleaned.append(digits)
    return tuple(cleaned)


@dataclass(frozen=True)
class AdmissionConfig:
    mode: AdmissionMode = AdmissionMode.ADMIN_ONLY
    allow_list: tuple[str, ...] = ()


def _admin_only(message: InboundMessage, allow_list: Iterable[str]) -> bool:
    """Accept if the bare sender number contains any allow-list entry."""
    sender = message.sender_id
    bare = strip_suffix(sender)
    for entry in allow_list:
        clean = digits_only(entry)
        if clean and clean in bare:
            logger.info(f"Message from admin number: {sender}")
            return True
    logger.debug(f"Ignoring message from non-admin: {sender}")
    return False


def decide(
    message: InboundMessage,
    mode: Union[AdmissionMode, str],
    allow_list: Iterable[str] = (),
) -> bool:
    """Return True if the bot should respond to this message.

    Self-originated and group messages are rejected under every mode.
    An unrecognized mode is evaluated as admin_only.
    """
    sender = message.sender_id

    # Never answer ourselves (reply loops)
    if message.is_from_self:
        return False

    if message.is_group or is_group_address(sender):
        logger.debug(f"Ignoring group message from: {sender}")
        return False

    parsed = AdmissionMode.parse(mode)
    if parsed is None:
        logger.warning(f"Unknown response mode: {mode!r}, defaulting to admin_only")
        return _admin_only(message, allow_list)

    if parsed is AdmissionMode.ADMIN_ONLY:
        return _admin_only(message, allow_list)

    if parsed is AdmissionMode.COMMAND_ONLY:
        if is_command(message.text):
            logger.info(f"Bot command detected from: {sender}")
            return True
        logger.debug(f"Ignoring non-command message from: {sender}")
        return False

    if parsed is AdmissionMode.DIRECT_ONLY:
        if not is_group_address(sender):
            logger.info(f"Direct message from: {sender}")
            return True
        return False

    logger.info(f"Message from: {sender}")
    return True


class AdmissionPolicy:
    """Admission decisions bound to the startup configuration."""

    def __init__(self, config: AdmissionConfig):
        self.config = config

    def allows(self, message: InboundMessage) -> bool:
        return decide(message, self.config.mode, self.config.allow_list)
