"""Shared utilities for relaybot CLI commands."""

from rich.console import Console

console = Console()
