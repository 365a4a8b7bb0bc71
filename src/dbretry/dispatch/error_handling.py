"""
Classification of failed attempts.

Maps a TransportError raised by a transport onto a RequestBehaviour:
- deadline exceeded in flight: ambiguous for non-idempotent requests,
  unambiguous otherwise
- cancelled: request canceled
- anything else: routed through RetryOrchestrator with the error's reason
"""

from dbretry.dispatch.exceptions import (
    TransportCancelled,
    TransportDeadlineExceeded,
    TransportError,
)
from dbretry.models.behaviour import RequestBehaviour
from dbretry.models.enums import ErrorKind
from dbretry.models.request import Request
from dbretry.retry.orchestrator import RetryOrchestrator


def handle_transport_error(error: TransportError, request: Request) -> RequestBehaviour:
    """Turn a failed attempt into a retry-or-fail decision."""
    request.context["transport_error"] = {
        "type": type(error).__name__,
        "message": error.message,
        **error.details,
    }

    if isinstance(error, TransportDeadlineExceeded):
        kind = ErrorKind.UNAMBIGUOUS_TIMEOUT if request.idempotent else ErrorKind.AMBIGUOUS_TIMEOUT
        return RequestBehaviour.fail(kind, request.error_context())

    if isinstance(error, TransportCancelled):
        return RequestBehaviour.fail(ErrorKind.REQUEST_CANCELED, request.error_context())

    return RetryOrchestrator.decide(request, error.reason)
