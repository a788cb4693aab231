"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the relay (WhatsApp transport + health endpoint)."""
    from relaybot.config import RelaySettings, check_settings
    from relaybot.main import configure_logging, run

    settings = RelaySettings()
    configure_logging(settings.log_dir, debug=debug or settings.debug)
    check_settings(settings)

    console.print("[bold blue]Starting relaybot...[/bold blue]")
    asyncio.run(run(settings))
