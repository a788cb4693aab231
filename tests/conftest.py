"""Pytest configuration and shared fixtures."""

import os

import pytest
from unittest.mock import AsyncMock

from relaybot.channels.base import Transport, TransportInfo


class FakeTransport(Transport):
    """In-memory transport that records every send."""

    name = "fake"

    def __init__(self, ready: bool = True, self_address=None):
        super().__init__()
        self._ready = ready
        self._info = TransportInfo(self_address=self_address)
        self.sent: list[tuple[str, str]] = []

    async def start(self) -> bool:
        self._ready = True
        await self.emit("ready")
        return True

    async def stop(self):
        self._ready = False

    async def send_message(self, address: str, text: str):
        self.sent.append((address, text))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def no_sleep():
    """Injectable sleep that returns immediately and records the delays."""
    return AsyncMock(return_value=None)


@pytest.fixture(autouse=True)
def clean_relay_env(monkeypatch):
    """Keep RELAY_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("RELAY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_transport():
    """Factory for transports with a custom ready state / self address."""
    return FakeTransport
