"""
Caller-facing exceptions raised by the request lifecycle layer.

The orchestrator itself never raises for operational failures: it returns a
RequestBehaviour carrying an ErrorKind. Senders convert terminal behaviours
into the exceptions below, so callers can catch any client failure with a
single except clause on ClientError.
"""

from typing import Any


class ClientError(Exception):
    """
    Base exception for all request lifecycle errors.

    Carries the error context of the request that failed (service, operation,
    retry attempts and retry reasons) for diagnostics.
    """
    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class RequestCanceled(ClientError):
    """
    Raised when a failed attempt will not be retried.

    Either the request's retry strategy disallowed the retry (for example a
    non-idempotent operation failed for a reason that might have had a side
    effect) or the transport cancelled the request.
    """
    pass


class UnambiguousTimeout(ClientError):
    """
    Raised when the request deadline is exhausted and the operation is known
    not to have taken effect (or is safe to repeat).
    """
    pass


class AmbiguousTimeout(ClientError):
    """
    Raised when the deadline expired while a non-idempotent attempt was in
    flight, so the caller cannot know whether it took effect.
    """
    pass


class InvalidArgument(ClientError, ValueError):
    """
    Raised on programming errors, e.g. an unrecognised service identifier
    or a non-positive timeout override.
    """
    pass
