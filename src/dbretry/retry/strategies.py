"""
Retry strategies.

This module implements the Strategy Pattern for retry decisions. A strategy
answers one question: given a request and the reason its last attempt
failed, should the request be retried, and after how long?

Strategies are side-effect free: they read the request's idempotency flag
and attempt count but never mutate it. Recording the attempt is the
orchestrator's job.

Available strategies:
    1. BestEffortRetryStrategy: exponential backoff with a cap, gated on idempotency
    2. FailFastRetryStrategy: never retries (always-retry reasons still bypass it)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

from dbretry.retry.reason import RetryReason

if TYPE_CHECKING:
    from dbretry.config import Settings
    from dbretry.models.request import Request

DEFAULT_BACKOFF_CAP_MS = 50

BackoffCalculator = Callable[[int], int]


@dataclass(frozen=True)
class RetryAction:
    """
    Outcome of a strategy decision.

    duration is None when the request must not be retried.
    """

    duration: int | None = None

    def __post_init__(self) -> None:
        if self.duration is not None and self.duration < 0:
            raise ValueError("duration must be >= 0")

    @classmethod
    def with_duration(cls, duration: int) -> "RetryAction":
        return cls(duration=duration)

    @classmethod
    def no_retry(cls) -> "RetryAction":
        return cls(duration=None)

    @property
    def retry_requested(self) -> bool:
        return self.duration is not None


class RetryStrategy(Protocol):
    """
    Protocol for retry strategies.

    Any object with a matching `retry_after` method can be injected into a
    Request; no subclassing is required.
    """

    def retry_after(self, request: "Request", reason: RetryReason) -> RetryAction:
        """
        Decide whether and when to retry.

        Args:
            request: Request whose attempt failed (must not be mutated)
            reason: Classified failure reason

        Returns:
            RetryAction with a duration in milliseconds, or no_retry()
        """
        ...


def capped_exponential_backoff(cap: int = DEFAULT_BACKOFF_CAP_MS) -> BackoffCalculator:
    """Build a calculator returning min(2 ** attempt_count, cap) milliseconds."""
    if cap < 0:
        raise ValueError("cap must be >= 0")

    def calculate(attempt_count: int) -> int:
        # Avoid building huge ints once the cap is reached
        if attempt_count >= cap.bit_length():
            return cap
        return min(2 ** attempt_count, cap)

    return calculate


class BestEffortRetryStrategy:
    """
    Best-effort retry with capped exponential backoff.

    Retries are permitted when the request is idempotent or the reason allows
    non-idempotent retries. The delay is produced by the backoff calculator,
    by default min(2 ** attempt_count, cap) milliseconds. The attempt count
    itself is not limited unless max_attempts is given; the overall request
    deadline bounds the number of retries.
    """

    def __init__(
        self,
        backoff_calculator: BackoffCalculator | None = None,
        cap: int = DEFAULT_BACKOFF_CAP_MS,
        max_attempts: int | None = None,
    ):
        """
        Initialize best-effort retry strategy.

        Args:
            backoff_calculator: Maps attempt count to delay in ms (overrides cap)
            cap: Upper bound for the default exponential backoff (ms)
            max_attempts: Stop retrying once this many retries were recorded
        """
        if max_attempts is not None and max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self.cap = cap
        self.max_attempts = max_attempts
        self.backoff_calculator = backoff_calculator or capped_exponential_backoff(cap)
        self.name = "best_effort"

    def retry_after(self, request: "Request", reason: RetryReason) -> RetryAction:
        if not (request.idempotent or reason.allows_non_idempotent_retry):
            return RetryAction.no_retry()

        attempt_count = request.retry_attempt_count
        if self.max_attempts is not None and attempt_count >= self.max_attempts:
            return RetryAction.no_retry()

        return RetryAction.with_duration(self.backoff_calculator(attempt_count))

    def __repr__(self) -> str:
        return f"BestEffortRetryStrategy(cap={self.cap}, max_attempts={self.max_attempts})"


class FailFastRetryStrategy:
    """
    Strategy that never retries.

    Use case: latency-critical callers that prefer an immediate error.
    Reasons flagged always_retry are still retried by the orchestrator.
    """

    def __init__(self) -> None:
        self.name = "fail_fast"

    def retry_after(self, request: "Request", reason: RetryReason) -> RetryAction:
        return RetryAction.no_retry()

    def __repr__(self) -> str:
        return "FailFastRetryStrategy()"


# Default strategy shared by every request that does not override it
BEST_EFFORT = BestEffortRetryStrategy()
FAIL_FAST = FailFastRetryStrategy()


def build_default_strategy(settings: "Settings") -> RetryStrategy:
    """Best-effort strategy honouring RETRY_BACKOFF_CAP_MS."""
    if settings.RETRY_BACKOFF_CAP_MS == DEFAULT_BACKOFF_CAP_MS:
        return BEST_EFFORT
    return BestEffortRetryStrategy(cap=settings.RETRY_BACKOFF_CAP_MS)
