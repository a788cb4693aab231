"""Auth command — link the WhatsApp account through wacli."""

import asyncio
import subprocess
import sys

import click

from . import cli
from .shared import console


@cli.command()
def auth():
    """Link WhatsApp: runs `wacli auth` and shows the QR code to scan."""
    from relaybot.config import load_settings
    from relaybot.channels.whatsapp import WhatsAppTransport

    settings = load_settings()
    transport = WhatsAppTransport(wacli_path=settings.wacli_path)
    wacli = asyncio.run(transport.resolve_wacli())
    if not wacli:
        console.print("[red]wacli not found.[/red] Install: go install github.com/steipete/wacli@latest")
        sys.exit(1)

    console.print("[bold]Scan the QR code with WhatsApp → Linked devices.[/bold]")
    result = subprocess.run([wacli, "auth"])
    if result.returncode != 0:
        console.print(f"[red]wacli auth failed (rc={result.returncode}).[/red]")
        sys.exit(result.returncode)
    console.print("[green]✓ WhatsApp linked.[/green] Run 'relaybot start'.")
