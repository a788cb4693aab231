"""relaybot configuration management."""

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .admission import AdmissionConfig, AdmissionMode, clean_allow_list

logger = logging.getLogger("relaybot.config")


def split_list(value: Optional[str]) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class RelaySettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Admission
    response_mode: str = Field(
        default="admin_only",
        description="admin_only | command_only | direct_messages_only | all",
    )
    admin_numbers: str = Field(default="", description="Comma-separated admin phone numbers")

    # Startup broadcast
    broadcast_numbers: str = Field(
        default="",
        description="Comma-separated broadcast recipients (defaults to admin_numbers)",
    )
    bot_name: str = Field(default="WhatsApp API Bot", description="Display name in announcements")
    send_welcome_to_self: bool = Field(default=False, description="Also announce to the bot's own number")
    bot_number: Optional[str] = Field(default=None, description="The bot's own phone number")

    # External API
    api_url: str = Field(default="", description="External API base URL")
    api_key: Optional[str] = Field(default=None, description="External API key")

    # Server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Health endpoint port")
    debug: bool = Field(default=False, description="Debug logging")
    log_dir: str = Field(default="logs", description="Directory for daily log files")

    # Transport
    wacli_path: Optional[str] = Field(default=None, description="Path to the wacli binary")

    model_config = {"env_prefix": "RELAY_", "env_file": ".env", "extra": "ignore", "frozen": True}

    @property
    def admin_list(self) -> list[str]:
        return split_list(self.admin_numbers)

    @property
    def broadcast_list(self) -> list[str]:
        return split_list(self.broadcast_numbers) or self.admin_list

    def admission_config(self) -> AdmissionConfig:
        """Freeze the admission mode and allow-list for the process lifetime."""
        return AdmissionConfig(
            mode=AdmissionMode.from_config(self.response_mode),
            allow_list=clean_allow_list(self.admin_list),
        )


def check_settings(settings: RelaySettings):
    """Warn about settings that leave the relay unable to answer."""
    if not settings.api_url:
        logger.warning("RELAY_API_URL is not set — API commands will answer with fallback messages.")

    mode = AdmissionMode.parse(settings.response_mode)
    if mode is AdmissionMode.ADMIN_ONLY and not clean_allow_list(settings.admin_list):
        logger.warning("Response mode is admin_only but RELAY_ADMIN_NUMBERS is empty — no message will be answered.")
    elif mode is AdmissionMode.ALL:
        logger.warning("Response mode is 'all' — the bot answers every direct message.")


def load_settings() -> RelaySettings:
    """Load settings from environment."""
    settings = RelaySettings()
    check_settings(settings)
    return settings
