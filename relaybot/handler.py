"""Per-message pipeline: admission -> classify -> dispatch -> deliver."""

import logging

from .admission import AdmissionPolicy
from .commands import classify
from .communication.errors import describe_error
from .communication.inbound import InboundMessage
from .communication.outbound import clean_text, preview
from .delivery import DeliveryAgent
from .dispatch import DispatchRouter

logger = logging.getLogger("relaybot.handler")


class MessageHandler:
    """Transport `message` handler.

    Delivery failures are logged and swallowed here; the sender simply
    gets no reply.
    """

    def __init__(self, policy: AdmissionPolicy, router: DispatchRouter, delivery: DeliveryAgent):
        self.policy = policy
        self.router = router
        self.delivery = delivery

    async def handle(self, message: InboundMessage) -> bool:
        """Process one inbound message. Returns True if a reply was delivered."""
        if not message.text:
            return False

        if not self.policy.allows(message):
            return False

        sender = message.sender_id
        logger.info(f"Received bot message from {sender}: {preview(message.text, 100)}")

        command = classify(message.text)
        reply = clean_text(await self.router.dispatch(command))

        try:
            await self.delivery.deliver(sender, reply)
        except Exception as e:
            logger.error(
                f"Failed to reply to {sender} (command={command.kind}, "
                f"message={preview(message.text)!r}): {describe_error(e)}"
            )
            return False
        return True
