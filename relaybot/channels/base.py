"""Transport base class — the event/method surface the relay depends on."""

import inspect
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("relaybot.transport")

EVENTS = ("message", "ready", "qr", "authenticated", "auth_failure", "disconnected", "change_state")


@dataclass(frozen=True)
class TransportInfo:
    self_address: Optional[str] = None


class Transport(ABC):
    """Base class for messaging transports.

    Transports emit:
        message(InboundMessage), ready(), qr(code), authenticated(),
        auth_failure(reason), disconnected(reason), change_state(state)

    Handlers may be plain functions or coroutine functions. `emit()`
    awaits them in registration order; a failing handler is logged and
    does not stop the others.
    """

    name: str = "transport"

    def __init__(self):
        self._handlers: dict[str, list[Callable]] = defaultdict(list)
        self._ready = False
        self._info: Optional[TransportInfo] = None

    def on(self, event: str, handler: Callable):
        if event not in EVENTS:
            raise ValueError(f"Unknown transport event: {event}")
        self._handlers[event].append(handler)

    async def emit(self, event: str, *args):
        for handler in list(self._handlers.get(event, [])):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"[{self.name}] {event} handler failed: {e}", exc_info=True)

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def info(self) -> Optional[TransportInfo]:
        """Connection info, available once the transport is ready."""
        return self._info if self._ready else None

    @abstractmethod
    async def start(self) -> bool:
        """Connect and begin emitting events. Returns False on failure."""

    @abstractmethod
    async def stop(self):
        """Disconnect and release resources."""

    @abstractmethod
    async def send_message(self, address: str, text: str):
        """Send a text message to a transport address. May raise."""
