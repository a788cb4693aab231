"""Communication sub-core — channel-agnostic message handling.

- Inbound: InboundMessage, address normalization and validation
- Outbound: message splitting, whitespace cleanup, log previews
- Errors: relay exception hierarchy, error descriptions for logs
"""

from .errors import RelayError, SendError, TransportError, TransportNotReadyError, describe_error
from .inbound import (
    DIRECT_SUFFIX,
    GROUP_SUFFIX,
    InboundMessage,
    digits_only,
    is_group_address,
    is_valid_recipient,
    normalize_recipient,
    strip_suffix,
    to_address,
)
from .outbound import clean_text, preview, split_message

__all__ = [
    # Inbound
    "DIRECT_SUFFIX",
    "GROUP_SUFFIX",
    "InboundMessage",
    "digits_only",
    "is_group_address",
    "is_valid_recipient",
    "normalize_recipient",
    "strip_suffix",
    "to_address",
    # Outbound
    "clean_text",
    "preview",
    "split_message",
    # Errors
    "RelayError",
    "SendError",
    "TransportError",
    "TransportNotReadyError",
    "describe_error",
]
