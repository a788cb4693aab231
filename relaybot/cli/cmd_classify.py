"""Classify command — preview command routing without calling the API."""

import dataclasses

import click

from . import cli
from .shared import console


@cli.command()
@click.argument("text", nargs=-1, required=True)
def classify(text):
    """Show how TEXT would be classified."""
    from relaybot.commands import classify as classify_text

    command = classify_text(" ".join(text))
    fields = dataclasses.asdict(command)
    console.print(f"[bold]{command.kind}[/bold]")
    for key, value in fields.items():
        console.print(f"  {key}: {value!r}")
