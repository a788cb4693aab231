"""Inbound message model and WhatsApp address helpers."""

import re
from dataclasses import dataclass

DIRECT_SUFFIX = "@c.us"
GROUP_SUFFIX = "@g.us"

# "+<10-15 digits>" or "<10-15 digits>@c.us"
_RECIPIENT_RE = re.compile(r"^\+\d{10,15}$|^\d{10,15}@c\.us$")


@dataclass(frozen=True)
class InboundMessage:
    sender_id: str      # transport address, e.g. 15550100@c.us
    text: str
    is_from_self: bool = False
    is_group: bool = False


def digits_only(value: str) -> str:
    """Strip everything except digit characters."""
    return re.sub(r"\D", "", value or "")


def strip_suffix(address: str) -> str:
    """Bare number for a direct-chat address ("15550100@c.us" -> "15550100")."""
    return address.replace(DIRECT_SUFFIX, "")


def is_group_address(address: str) -> bool:
    return (address or "").endswith(GROUP_SUFFIX)


def to_address(recipient: str) -> str:
    """Resolve a recipient into a transport-addressable form.

    Anything that already carries a domain (contains "@") is returned as-is;
    otherwise the direct-chat suffix is appended.
    """
    recipient = recipient.strip()
    if "@" in recipient:
        return recipient
    return f"{recipient}{DIRECT_SUFFIX}"


def is_valid_recipient(recipient: str) -> bool:
    """International "+"-prefixed number or an already-suffixed address."""
    return bool(_RECIPIENT_RE.match((recipient or "").strip()))


def normalize_recipient(recipient: str) -> str:
    """Normalize a configured phone number to a direct-chat address."""
    trimmed = recipient.strip()
    if DIRECT_SUFFIX in trimmed:
        return trimmed
    return f"{digits_only(trimmed)}{DIRECT_SUFFIX}"
