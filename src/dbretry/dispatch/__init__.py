"""
Senders that drive requests through their attempts.

Exports the blocking and asyncio senders plus the transport exceptions
transports raise to report a failed attempt.
"""

from dbretry.dispatch.error_handling import handle_transport_error
from dbretry.dispatch.exceptions import (
    TransportCancelled,
    TransportDeadlineExceeded,
    TransportError,
)
from dbretry.dispatch.sender import AsyncRequestSender, RequestSender

__all__ = [
    "RequestSender",
    "AsyncRequestSender",
    "handle_transport_error",
    "TransportError",
    "TransportDeadlineExceeded",
    "TransportCancelled",
]
