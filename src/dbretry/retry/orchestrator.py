"""
Retry orchestrator.

The orchestrator is the single decision point invoked after every failed
attempt. It combines reason-level overrides with the request's retry
strategy and returns a RequestBehaviour:

    1. Always-retry reasons: controlled backoff schedule, strategy bypassed
    2. Otherwise: ask the request's strategy
       - retry requested: record the attempt, retry after its duration
       - no retry: fail with REQUEST_CANCELED

The orchestrator performs no I/O and never sleeps. Scheduling the resend
(and enforcing the request deadline) is the sender's responsibility, so the
same decision logic serves both sync and async senders.
"""

from typing import TYPE_CHECKING

from dbretry.models.behaviour import RequestBehaviour
from dbretry.models.enums import ErrorKind
from dbretry.retry.reason import RetryReason

if TYPE_CHECKING:
    from dbretry.models.request import Request

# Delay (ms) by number of retries already recorded; the last entry repeats
CONTROLLED_BACKOFF_MS: tuple[int, ...] = (1, 10, 50, 100, 500, 1000)


class RetryOrchestrator:
    """
    Stateless retry decision function.

    Sole writer of a request's retry history: every Retry decision appends
    exactly one attempt, a Fail decision appends nothing.
    """

    @staticmethod
    def controlled_backoff(retry_attempt_count: int) -> int:
        """Fixed delay schedule used for always-retry reasons."""
        if retry_attempt_count < 0:
            raise ValueError("retry_attempt_count must be >= 0")
        return CONTROLLED_BACKOFF_MS[min(retry_attempt_count, len(CONTROLLED_BACKOFF_MS) - 1)]

    @classmethod
    def decide(cls, request: "Request", reason: RetryReason) -> RequestBehaviour:
        """
        Decide how the sender proceeds after a failed attempt.

        Args:
            request: Request whose attempt failed
            reason: Classified failure reason

        Returns:
            RequestBehaviour.retry(ms) or RequestBehaviour.fail(REQUEST_CANCELED)
        """
        if reason.always_retry:
            duration = cls.controlled_backoff(request.retry_attempt_count)
            request.add_retry_attempt(reason, duration)
            return RequestBehaviour.retry(duration)

        action = request.retry_strategy.retry_after(request, reason)
        if not action.retry_requested:
            context = request.error_context()
            context["last_reason"] = reason.label
            return RequestBehaviour.fail(ErrorKind.REQUEST_CANCELED, context)

        request.add_retry_attempt(reason, action.duration)
        return RequestBehaviour.retry(action.duration)

    maybe_retry = decide
