"""Status command."""

import asyncio

from rich.table import Table

from . import cli
from .shared import console


@cli.command()
def status():
    """Show relaybot configuration and transport status."""
    from relaybot import __version__
    from relaybot.channels.whatsapp import WhatsAppTransport
    from relaybot.communication.inbound import is_valid_recipient
    from relaybot.config import load_settings

    settings = load_settings()
    admission = settings.admission_config()

    table = Table(title=f"relaybot status v{__version__}", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Response mode", admission.mode.value)
    table.add_row("Admin numbers", ", ".join(admission.allow_list) or "[yellow]none[/yellow]")

    recipients = settings.broadcast_list
    if recipients:
        rendered = [r if is_valid_recipient(r) else f"[red]{r} (invalid)[/red]" for r in recipients]
        table.add_row("Broadcast to", ", ".join(rendered))
    else:
        table.add_row("Broadcast to", "[dim]nobody[/dim]")
    table.add_row("Announce to self", "yes" if settings.send_welcome_to_self else "no")

    table.add_row("API URL", settings.api_url or "[red]not set[/red]")
    table.add_row("API key", "[green]set[/green]" if settings.api_key else "[yellow]not set[/yellow]")
    table.add_row("Health endpoint", f"http://{settings.host}:{settings.port}/health")

    transport = WhatsAppTransport(wacli_path=settings.wacli_path)
    wacli = asyncio.run(transport.resolve_wacli())
    table.add_row("wacli", wacli or "[red]not found[/red]")
    table.add_row("WhatsApp session", "[green]linked[/green]" if transport.has_session() else "[red]not linked (run 'relaybot auth')[/red]")

    console.print(table)
