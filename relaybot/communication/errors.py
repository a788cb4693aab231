"""Relay exception hierarchy and short error descriptions for logs."""

import asyncio
import json

import httpx


class RelayError(Exception):
    """Base class for all relaybot errors."""
    pass

class TransportError(RelayError):
    """The messaging transport could not complete an operation."""
    pass

class TransportNotReadyError(TransportError):
    """Send attempted before the transport reported itself ready."""
    pass

class SendError(TransportError):
    """The transport rejected or failed an outbound message."""
    pass


def describe_error(e: Exception) -> str:
    """One-line description of a failure, suitable for a log line.

    Upstream API failures (timeouts, HTTP status, malformed bodies) are
    named explicitly; anything else falls back to the exception type.
    """
    # httpx status errors first: they carry the upstream code
    if isinstance(e, httpx.HTTPStatusError):
        return f"upstream returned HTTP {e.response.status_code}"

    # Timeouts (httpx and asyncio)
    if isinstance(e, httpx.TimeoutException):
        return "upstream request timed out"
    if isinstance(e, asyncio.TimeoutError):
        return "operation timed out"

    # Connection-level failures
    if isinstance(e, httpx.ConnectError):
        return "cannot connect to upstream"
    if isinstance(e, httpx.RequestError):
        return f"upstream request failed ({type(e).__name__})"

    # Malformed payloads
    if isinstance(e, json.JSONDecodeError):
        return "upstream returned a non-JSON body"
    if isinstance(e, (KeyError, IndexError, TypeError)):
        return f"unexpected upstream response shape ({type(e).__name__}: {e})"

    if isinstance(e, TransportNotReadyError):
        return "transport not ready"
    if isinstance(e, TransportError):
        return f"transport error: {e}"

    return f"{type(e).__name__}: {e}"
