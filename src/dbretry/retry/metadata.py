"""
Retry attempt tracking.

This module defines the RetryAttempt dataclass, one entry of a request's
append-only retry history.
"""

from dataclasses import dataclass

from dbretry.retry.reason import RetryReason


@dataclass(frozen=True)
class RetryAttempt:
    """
    One recorded retry decision for a request.

    Attributes:
        reason: Why the attempt failed
        index: Logical attempt index (0 for the first retry decision)
        retry_after_ms: Backoff the orchestrator returned for this attempt
    """

    reason: RetryReason
    index: int
    retry_after_ms: int

    def __post_init__(self) -> None:
        """Validate attempt invariants."""
        if self.index < 0:
            raise ValueError("index must be >= 0")

        if self.retry_after_ms < 0:
            raise ValueError("retry_after_ms must be >= 0")
