"""relaybot — Main entry point."""

import asyncio
import logging
import os
from datetime import date
from typing import Optional

from .admission import AdmissionConfig, AdmissionPolicy
from .broadcast import BroadcastInitializer
from .channels.whatsapp import WhatsAppTransport
from .config import RelaySettings, check_settings, load_settings
from .delivery import DeliveryAgent
from .dispatch import DispatchRouter
from .handler import MessageHandler
from .health import create_server

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("relaybot")


def configure_logging(log_dir: str = "logs", debug: bool = False):
    """Console + daily log file ({log_dir}/YYYY-MM-DD.log)."""
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"{date.today().isoformat()}.log")
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),                          # stderr (console)
            logging.FileHandler(log_file, encoding="utf-8"),  # logs/<date>.log
        ],
    )
    if debug:
        logger.setLevel(logging.DEBUG)


def _log_transport_events(transport: WhatsAppTransport):
    transport.on("authenticated", lambda: logger.info("WhatsApp client authenticated successfully"))
    transport.on("auth_failure", lambda reason: logger.error(f"Authentication failed: {reason}"))
    transport.on("disconnected", lambda reason: logger.warning(f"WhatsApp client disconnected: {reason}"))
    transport.on("change_state", lambda state: logger.info(f"WhatsApp client state changed: {state}"))
    transport.on("ready", lambda: logger.info("WhatsApp client is ready!"))


def build_relay(settings: RelaySettings, transport: WhatsAppTransport) -> tuple[MessageHandler, BroadcastInitializer, AdmissionConfig]:
    """Wire the per-message pipeline and the startup broadcast onto a transport."""
    admission = settings.admission_config()
    policy = AdmissionPolicy(admission)
    router = DispatchRouter(settings.api_url, settings.api_key)
    handler = MessageHandler(policy, router, DeliveryAgent(transport))
    broadcast = BroadcastInitializer(
        transport,
        recipients=settings.broadcast_list,
        bot_name=settings.bot_name,
        send_to_self=settings.send_welcome_to_self,
    )
    transport.on("message", handler.handle)
    transport.on("ready", broadcast.on_ready)
    return handler, broadcast, admission


async def run(settings: Optional[RelaySettings] = None):
    """Main run loop."""
    settings = settings or load_settings()
    transport = WhatsAppTransport(wacli_path=settings.wacli_path, bot_number=settings.bot_number)
    _log_transport_events(transport)
    _, _, admission = build_relay(settings, transport)
    logger.info(
        f"Response mode: {admission.mode.value} "
        f"({len(admission.allow_list)} admin number(s), {len(settings.broadcast_list)} broadcast recipient(s))"
    )

    server = create_server(settings.host, settings.port)
    server_task = asyncio.create_task(server.serve())
    logger.info(f"Health endpoint on http://{settings.host}:{settings.port}/health")

    try:
        logger.info("Initializing WhatsApp transport...")
        if not await transport.start():
            logger.error("Failed to initialize WhatsApp transport.")
            return

        logger.info("relaybot is running. Press Ctrl+C to stop.")
        while not server_task.done():
            await asyncio.sleep(1)

    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        await transport.stop()
        server.should_exit = True
        await server_task


def main():
    """Entry point."""
    settings = RelaySettings()
    configure_logging(settings.log_dir, settings.debug)
    check_settings(settings)
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
