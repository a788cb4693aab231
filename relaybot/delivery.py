"""Delivery agent — sends replies through the transport with bounded retry."""

import asyncio
import logging

from .communication.errors import TransportNotReadyError, describe_error
from .communication.inbound import to_address
from .communication.outbound import preview

logger = logging.getLogger("relaybot.delivery")

MAX_RETRIES = 3
RETRY_DELAY = 2.0   # seconds, fixed (not exponential)


class DeliveryAgent:
    """Send a message, retrying a fixed number of times with a fixed delay.

    `sleep` is injectable so callers (and tests) control the backoff wait;
    asyncio.sleep is cancellable, so a stopping process is never stuck here.
    """

    def __init__(self, transport, retry_delay: float = RETRY_DELAY, sleep=asyncio.sleep):
        self.transport = transport
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def deliver(self, recipient: str, message: str, max_retries: int = MAX_RETRIES):
        """Deliver `message` to `recipient`.

        Raises:
            TransportNotReadyError: transport not ready (no attempt consumed).
            Exception: the last send failure once retries are exhausted.
        """
        if not self.transport.is_ready:
            raise TransportNotReadyError("WhatsApp transport not ready")

        address = to_address(recipient)
        remaining = max(1, max_retries)

        for attempt in range(1, remaining + 1):
            try:
                await self.transport.send_message(address, message)
                logger.info(f"Message sent to {recipient}: {preview(message)}")
                return
            except Exception as e:
                left = remaining - attempt
                if left == 0:
                    logger.error(f"Error sending message to {recipient} after {attempt} attempt(s): {describe_error(e)}")
                    raise
                logger.warning(f"Retry sending message to {recipient}, attempts left: {left} ({describe_error(e)})")
                await self._sleep(self.retry_delay)
