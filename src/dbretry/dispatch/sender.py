"""
Request senders.

Senders drive a Request through its attempts: they call the transport,
classify failures, consult the orchestrator, wait out the backoff and
resend. They own the request deadline:

- The absolute deadline is computed once, when sending starts.
- Before every attempt the remaining budget is checked and handed to the
  transport.
- A Retry decision whose delay would reach the deadline is converted into
  an UNAMBIGUOUS_TIMEOUT failure instead of sleeping past the budget.

RequestSender blocks with time.sleep; AsyncRequestSender suspends with
asyncio.sleep. The decision logic is shared.

Usage:
    sender = RequestSender()
    response = sender.send(request, transport.call)
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from dbretry.config import Settings, settings as default_settings
from dbretry.dispatch.error_handling import handle_transport_error
from dbretry.dispatch.exceptions import TransportError
from dbretry.exceptions import UnambiguousTimeout
from dbretry.logging_config import request_log_context
from dbretry.models.behaviour import RequestBehaviour
from dbretry.models.enums import ErrorKind
from dbretry.models.request import Request
from dbretry.monitoring.metrics import (
    request_failures_total,
    request_retries_total,
    retry_backoff_ms,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Transport call: (request, remaining budget in ms) -> response
Dispatch = Callable[[Request, int], T]
AsyncDispatch = Callable[[Request, int], Awaitable[T]]


class _BaseSender:
    """Deadline bookkeeping and failure handling shared by both senders."""

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            settings: Application settings (metrics toggle)
            clock: Monotonic clock in seconds, injectable for tests
        """
        self.settings = settings if settings is not None else default_settings
        self._clock = clock

    def _start_deadline(self, request: Request) -> float:
        deadline = self._clock() + request.timeout / 1000
        logger.debug("Sending request", timeout_ms=request.timeout)
        return deadline

    def _remaining_ms(self, request: Request, deadline: float) -> int:
        """Remaining budget before an attempt; raises once it is spent."""
        remaining_ms = int((deadline - self._clock()) * 1000)
        if remaining_ms <= 0:
            behaviour = RequestBehaviour.fail(
                ErrorKind.UNAMBIGUOUS_TIMEOUT, request.error_context()
            )
            self._record_failure(request, behaviour)
            raise UnambiguousTimeout(
                "Request deadline exceeded before the next attempt",
                behaviour.context,
            )
        return remaining_ms

    def _handle_failure(
        self, request: Request, error: TransportError, deadline: float
    ) -> RequestBehaviour:
        behaviour = handle_transport_error(error, request)

        if behaviour.should_retry:
            remaining_ms = (deadline - self._clock()) * 1000
            if behaviour.retry_duration >= remaining_ms:
                context = request.error_context()
                context["retry_after_ms"] = behaviour.retry_duration
                context["remaining_ms"] = max(0, int(remaining_ms))
                logger.warning(
                    "Retry would exceed request deadline",
                    reason=error.reason.label,
                    retry_after_ms=behaviour.retry_duration,
                    remaining_ms=context["remaining_ms"],
                )
                behaviour = RequestBehaviour.fail(ErrorKind.UNAMBIGUOUS_TIMEOUT, context)
            else:
                self._record_retry(request, error, behaviour)
                return behaviour

        self._record_failure(request, behaviour)
        return behaviour

    def _record_retry(
        self, request: Request, error: TransportError, behaviour: RequestBehaviour
    ) -> None:
        logger.info(
            "Retrying request",
            reason=error.reason.label,
            attempt=request.retry_attempt_count,
            retry_after_ms=behaviour.retry_duration,
        )
        if self.settings.PROMETHEUS_ENABLED:
            request_retries_total.labels(
                service=request.service.value, reason=error.reason.label
            ).inc()
            retry_backoff_ms.labels(service=request.service.value).observe(
                behaviour.retry_duration
            )

    def _record_failure(self, request: Request, behaviour: RequestBehaviour) -> None:
        logger.warning(
            "Request failed",
            error_kind=behaviour.error.value,
            retry_attempts=request.retry_attempt_count,
            retry_reasons=[reason.label for reason in request.retry_reasons],
        )
        if self.settings.PROMETHEUS_ENABLED:
            request_failures_total.labels(
                service=request.service.value, error_kind=behaviour.error.value
            ).inc()


class RequestSender(_BaseSender):
    """
    Blocking sender.

    The backoff wait happens on the calling thread.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        super().__init__(settings, clock)
        self._sleep = sleep

    def send(self, request: Request, dispatch: Dispatch[T]) -> T:
        """
        Send a request, retrying failed attempts until success or a terminal error.

        Args:
            request: Request to send (its retry history is updated in place)
            dispatch: Transport call receiving the request and remaining budget (ms)

        Returns:
            Whatever the transport returned for the successful attempt

        Raises:
            RequestCanceled: Retry disallowed by the strategy, or transport cancelled
            UnambiguousTimeout: Deadline reached without an ambiguous attempt in flight
            AmbiguousTimeout: Deadline reached with a non-idempotent attempt in flight
        """
        with request_log_context(request):
            deadline = self._start_deadline(request)
            while True:
                remaining_ms = self._remaining_ms(request, deadline)
                try:
                    return dispatch(request, remaining_ms)
                except TransportError as e:
                    behaviour = self._handle_failure(request, e, deadline)
                    if not behaviour.should_retry:
                        raise behaviour.to_exception() from e

                self._sleep(behaviour.retry_duration / 1000)


class AsyncRequestSender(_BaseSender):
    """
    Asyncio sender.

    The backoff wait suspends the calling task instead of blocking.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        super().__init__(settings, clock)
        self._sleep = sleep

    async def send(self, request: Request, dispatch: AsyncDispatch[T]) -> T:
        """
        Send a request, retrying failed attempts until success or a terminal error.

        See RequestSender.send for arguments and raised exceptions.
        """
        with request_log_context(request):
            deadline = self._start_deadline(request)
            while True:
                remaining_ms = self._remaining_ms(request, deadline)
                try:
                    return await dispatch(request, remaining_ms)
                except TransportError as e:
                    behaviour = self._handle_failure(request, e, deadline)
                    if not behaviour.should_retry:
                        raise behaviour.to_exception() from e

                await self._sleep(behaviour.retry_duration / 1000)
