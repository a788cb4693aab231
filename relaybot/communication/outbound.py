"""Outbound text helpers — applied before anything reaches the transport.

Channel-agnostic: message splitting for platform length limits and
whitespace cleanup. Log previews live here too so every module truncates
message bodies the same way.
"""

import re


def clean_text(text: str) -> str:
    """Collapse runs of blank lines and trim surrounding whitespace."""
    if not text:
        return text
    return re.sub(r'\n{3,}', '\n\n', text).strip()


def preview(text: str, limit: int = 50) -> str:
    """Short single-line preview of a message body for logs."""
    text = (text or "").replace("\n", " ")
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def split_message(text: str, max_length: int = 4096) -> list[str]:
    """Split a long message into chunks respecting platform length limits.

    Tries to split at newlines first, then spaces, then hard-cuts.

    Args:
        text: Message text to split
        max_length: Maximum length per chunk (default: 4096 for WhatsApp)

    Returns:
        List of message chunks
    """
    if len(text) <= max_length:
        return [text]

    chunks = []
    remaining = text

    while remaining:
        if len(remaining) <= max_length:
            chunks.append(remaining)
            break

        # Try splitting at a newline
        split_at = remaining.rfind("\n", 0, max_length)
        if split_at == -1:
            # Try splitting at a space
            split_at = remaining.rfind(" ", 0, max_length)
        if split_at == -1:
            # Hard cut
            split_at = max_length

        chunks.append(remaining[:split_at])
        remaining = remaining[split_at:].lstrip()

    return chunks
