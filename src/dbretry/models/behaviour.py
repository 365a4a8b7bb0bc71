"""
Request behaviour returned by the orchestrator.

A RequestBehaviour tells the sender what to do after a failed attempt:
resend the same request after a delay, or surface a terminal error.
"""

from dataclasses import dataclass, field
from typing import Any

from dbretry.exceptions import ClientError
from dbretry.models.enums import ErrorKind


@dataclass(frozen=True)
class RequestBehaviour:
    """
    Tagged retry-or-fail decision.

    Exactly one of retry_duration (ms) and error is set.
    """

    retry_duration: int | None = None
    error: ErrorKind | None = None
    context: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        """Validate that exactly one outcome is set."""
        if (self.retry_duration is None) == (self.error is None):
            raise ValueError("Either the error or the retry duration must be set, not both")

        if self.retry_duration is not None and self.retry_duration < 0:
            raise ValueError("retry_duration must be >= 0")

    @classmethod
    def retry(cls, after: int) -> "RequestBehaviour":
        return cls(retry_duration=after)

    @classmethod
    def fail(cls, error: ErrorKind, context: dict[str, Any] | None = None) -> "RequestBehaviour":
        return cls(error=error, context=context or {})

    @property
    def should_retry(self) -> bool:
        return self.retry_duration is not None

    def to_exception(self, message: str | None = None) -> ClientError:
        """
        Convert a failed behaviour into the caller-facing exception.

        Raises:
            ValueError: If called on a retry behaviour
        """
        if self.error is None:
            raise ValueError("Retry behaviour has no error to raise")
        return self.error.to_exception(message, self.context)
