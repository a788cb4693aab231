"""relaybot — WhatsApp command relay for an external HTTP API."""

__version__ = "0.1.0"
