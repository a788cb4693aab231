"""Dispatch router — runs a classified command against the external API.

Every branch catches its own failures and answers with a fallback string,
so `dispatch()` never raises to the transport layer.
"""

import logging
from typing import Optional

import httpx

from .commands import Command, Generic, Help, Search, Translate, Weather
from .communication.errors import describe_error

logger = logging.getLogger("relaybot.dispatch")

# Timeouts (seconds). Generic chat hits a heavier backend.
COMMAND_TIMEOUT = 10.0
CHAT_TIMEOUT = 15.0

SEARCH_RESULT_LIMIT = 3

HELP_MESSAGE = """Available commands:

🌤️ /weather [location] - Get weather information
🔤 /translate [text] - Translate text to English
🔍 /search [query] - Search for information
❓ /help - Show this help message

You can also send me any message and I'll try to help!"""

PROCESSING_ERROR = "Sorry, I encountered an error processing your request. Please try again."
TRANSLATE_ERROR = "Sorry, I couldn't translate that text. Please try again."
CHAT_EMPTY = "I received your message but couldn't generate a response."
CHAT_ERROR = "I received your message. How can I help you? Try sending /help for available commands."


def weather_error(location: str) -> str:
    return f"Sorry, I couldn't get weather information for {location}. Please try again."


def search_error(query: str) -> str:
    return f'Sorry, I couldn\'t search for "{query}". Please try again.'


def format_search_results(query: str, results: list) -> str:
    """Render at most SEARCH_RESULT_LIMIT results as a numbered list."""
    blocks = [
        f"{i}. {result['title']}\n{result['description']}"
        for i, result in enumerate(results[:SEARCH_RESULT_LIMIT], 1)
    ]
    return f'Search results for "{query}":\n\n' + "\n\n".join(blocks)


class DispatchRouter:
    """Routes commands to the external HTTP API and formats replies."""

    def __init__(self, api_url: str, api_key: Optional[str] = None):
        self.base_url = (api_url or "").rstrip("/")
        self.api_key = api_key

    def _auth_headers(self) -> dict:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    async def dispatch(self, command: Command) -> str:
        """Run a command and return the reply text. Never raises."""
        try:
            if isinstance(command, Weather):
                return await self.get_weather(command.location)
            if isinstance(command, Translate):
                return await self.translate(command.text)
            if isinstance(command, Search):
                return await self.search(command.query)
            if isinstance(command, Help):
                return HELP_MESSAGE
            if isinstance(command, Generic):
                return await self.chat(command.text)
            raise TypeError(f"Unsupported command: {command!r}")
        except Exception as e:
            logger.error(f"Error processing command {getattr(command, 'kind', command)!r}: {describe_error(e)}", exc_info=True)
            return PROCESSING_ERROR

    async def get_weather(self, location: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=COMMAND_TIMEOUT) as client:
                response = await client.get(
                    f"{self.base_url}/weather",
                    params={"location": location, "key": self.api_key},
                )
                response.raise_for_status()
                weather = response.json()
            return f"Weather in {location}: {weather['description']}, {weather['temperature']}°C"
        except Exception as e:
            logger.error(f"Weather API error for {location!r}: {describe_error(e)}")
            return weather_error(location)

    async def translate(self, text: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=COMMAND_TIMEOUT) as client:
                response = await client.post(
                    f"{self.base_url}/translate",
                    json={"text": text, "target_language": "en"},
                    headers=self._auth_headers(),
                )
                response.raise_for_status()
                data = response.json()
            return f"Translation: {data['translated_text']}"
        except Exception as e:
            logger.error(f"Translation API error: {describe_error(e)}")
            return TRANSLATE_ERROR

    async def search(self, query: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=COMMAND_TIMEOUT) as client:
                response = await client.get(
                    f"{self.base_url}/search",
                    params={"q": query, "api_key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
            results = data["results"]
            if not isinstance(results, list):
                raise TypeError(f"results is {type(results).__name__}, expected list")
            return format_search_results(query, results)
        except Exception as e:
            logger.error(f"Search API error for {query!r}: {describe_error(e)}")
            return search_error(query)

    async def chat(self, text: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=CHAT_TIMEOUT) as client:
                response = await client.post(
                    f"{self.base_url}/chat",
                    json={"message": text},
                    headers=self._auth_headers(),
                )
                response.raise_for_status()
                data = response.json()
            reply = data.get("response")
            if reply is not None and not isinstance(reply, str):
                raise TypeError(f"response is {type(reply).__name__}, expected str")
            return reply or CHAT_EMPTY
        except Exception as e:
            logger.error(f"Generic API error: {describe_error(e)}")
            return CHAT_ERROR
