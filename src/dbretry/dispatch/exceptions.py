"""
Exceptions raised by transports into the senders.

A transport signals a failed attempt by raising one of these. The sender
classifies it (see error_handling) and either retries the request or
surfaces a caller-facing ClientError. Any other exception raised by a
transport is a bug or a non-retryable application error and propagates
unchanged.
"""

from typing import Any

from dbretry.retry.reason import RetryReason


class TransportError(Exception):
    """
    Base exception for failed attempts.

    The transport attaches the RetryReason it observed (e.g. KV_LOCKED for a
    document-locked response, SOCKET_NOT_AVAILABLE when no connection could
    be used). Defaults to UNKNOWN, which is only retried for idempotent
    requests.
    """
    def __init__(
        self,
        message: str,
        reason: RetryReason = RetryReason.UNKNOWN,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details or {}


class TransportDeadlineExceeded(TransportError):
    """
    Raised when the transport's own deadline expired while the attempt was
    in flight.

    Never retried: the request budget is spent.
    """
    pass


class TransportCancelled(TransportError):
    """
    Raised when the transport cancelled the attempt (e.g. the connection
    was shut down by the client).

    Never retried.
    """
    pass
