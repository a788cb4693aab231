"""Messaging transports."""

from .base import EVENTS, Transport, TransportInfo
from .whatsapp import WhatsAppTransport

__all__ = ["EVENTS", "Transport", "TransportInfo", "WhatsAppTransport"]
