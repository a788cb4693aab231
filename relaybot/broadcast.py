"""Startup broadcast — announce the bot to configured recipients once.

Runs after the transport reports ready, debounced by a short delay so the
WhatsApp session can settle. Each recipient is handled independently:
invalid numbers are skipped, send failures are logged and the loop goes on.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .communication.errors import describe_error
from .communication.inbound import is_valid_recipient, normalize_recipient

logger = logging.getLogger("relaybot.broadcast")

READY_DELAY = 3.0   # let the transport stabilize after `ready`
SEND_DELAY = 2.0    # between recipients, avoids rate limiting


def build_announcement(bot_name: str, started: Optional[datetime] = None) -> str:
    started = started or datetime.now()
    return f"""🤖 {bot_name} is now online and ready!

✅ Bot Status: Active
🕐 Started: {started.strftime("%Y-%m-%d %H:%M:%S")}

Available commands:
🌤️ /weather [location] - Get weather info
🔤 /translate [text] - Translate text
🔍 /search [query] - Search information
❓ /help - Show all commands

Send me any message to get started! 🚀"""


@dataclass
class BroadcastReport:
    sent: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class BroadcastInitializer:
    """One-time announcement to the configured recipients."""

    def __init__(
        self,
        transport,
        recipients: list[str],
        bot_name: str = "WhatsApp API Bot",
        send_to_self: bool = False,
        ready_delay: float = READY_DELAY,
        send_delay: float = SEND_DELAY,
        sleep=asyncio.sleep,
    ):
        self.transport = transport
        self.recipients = list(recipients)
        self.bot_name = bot_name
        self.send_to_self = send_to_self
        self.ready_delay = ready_delay
        self.send_delay = send_delay
        self._sleep = sleep
        self.welcome_sent = False
        self._task: Optional[asyncio.Task] = None

    def on_ready(self):
        """Transport `ready` handler. Schedules the broadcast at most once."""
        if self.welcome_sent:
            return
        self.welcome_sent = True
        self._task = asyncio.create_task(self._run_after_delay())

    async def _run_after_delay(self):
        await self._sleep(self.ready_delay)
        try:
            await self.run()
        except Exception as e:
            logger.error(f"Error in startup broadcast: {describe_error(e)}", exc_info=True)

    async def wait(self):
        """Wait for a scheduled broadcast to finish (no-op if none)."""
        if self._task:
            await self._task

    async def run(self) -> BroadcastReport:
        report = BroadcastReport()

        if not self.transport.is_ready:
            logger.warning("Transport not fully ready, skipping welcome message")
            return report

        if not self.recipients:
            logger.info("No broadcast recipients configured, skipping welcome message")
            return report

        logger.info(
            f"Sending welcome message to {len(self.recipients)} recipient(s): {', '.join(self.recipients)}"
        )
        message = build_announcement(self.bot_name)

        for recipient in self.recipients:
            if not is_valid_recipient(recipient):
                logger.warning(f"Invalid phone number format: {recipient}, skipping")
                report.skipped.append(recipient)
                continue

            address = normalize_recipient(recipient)
            logger.info(f"Sending welcome message to: {recipient} (as {address})")
            await self._sleep(self.send_delay)

            try:
                await self.transport.send_message(address, message)
                logger.info(f"✅ Welcome message sent to: {recipient}")
                report.sent.append(recipient)
            except Exception as e:
                logger.error(f"❌ Failed to send welcome message to {recipient}: {describe_error(e)}")
                report.failed.append(recipient)

        if self.send_to_self:
            await self._announce_to_self(message, report)

        return report

    async def _announce_to_self(self, message: str, report: BroadcastReport):
        info = self.transport.info
        self_address = info.self_address if info else None
        if not self_address:
            logger.warning("send_welcome_to_self is set but the bot's own number is unknown (set RELAY_BOT_NUMBER)")
            return
        try:
            await self.transport.send_message(self_address, message)
            logger.info("Welcome message sent to self (bot number)")
            report.sent.append(self_address)
        except Exception as e:
            logger.error(f"Failed to send welcome message to self: {describe_error(e)}")
            report.failed.append(self_address)
