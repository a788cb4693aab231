"""Command classification — free text to a typed command.

Pure functions, no I/O. Keyword matching is case-insensitive but the
payload keeps the sender's original casing.
"""

import re
from dataclasses import dataclass
from typing import Union

COMMAND_PREFIXES = ("/weather", "/translate", "/search", "/help")


@dataclass(frozen=True)
class Weather:
    location: str
    kind = "weather"


@dataclass(frozen=True)
class Translate:
    text: str
    kind = "translate"


@dataclass(frozen=True)
class Search:
    query: str
    kind = "search"


@dataclass(frozen=True)
class Help:
    kind = "help"


@dataclass(frozen=True)
class Generic:
    text: str
    kind = "generic"


Command = Union[Weather, Translate, Search, Help, Generic]


def _remove_first(text: str, word: str) -> str:
    """Drop the first case-insensitive occurrence of `word` from `text`."""
    return re.sub(re.escape(word), "", text, count=1, flags=re.IGNORECASE)


def classify(text: str) -> Command:
    """Map raw message text to exactly one command.

    Precedence: weather > translate > search > help > generic.
    Weather removal is substring-based, not phrase-aware:
    "what's the weather" -> Weather(location="what's the").
    """
    stripped = (text or "").strip()
    lowered = stripped.lower()

    if lowered.startswith("/weather") or "weather" in lowered:
        location = _remove_first(_remove_first(stripped, "/weather"), "weather")
        return Weather(location=location.strip())

    if lowered.startswith("/translate"):
        return Translate(text=" ".join(stripped.split(" ")[1:]))

    if lowered.startswith("/search"):
        return Search(query=_remove_first(stripped, "/search").strip())

    if lowered == "/help" or "help" in lowered:
        return Help()

    return Generic(text=text)


def is_command(text: str) -> bool:
    """True if the text starts with one of the slash-command prefixes."""
    lowered = (text or "").strip().lower()
    return any(lowered.startswith(prefix) for prefix in COMMAND_PREFIXES)
