"""
Request envelope.

A Request represents one logical operation across all of its attempts. It
is created when the caller issues the operation and dropped once a terminal
outcome (success or permanent failure) reaches the caller.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from dbretry.config import Settings, settings as default_settings
from dbretry.exceptions import InvalidArgument
from dbretry.models.enums import ServiceType
from dbretry.retry.metadata import RetryAttempt
from dbretry.retry.reason import RetryReason
from dbretry.retry.strategies import BEST_EFFORT, RetryStrategy, build_default_strategy

if TYPE_CHECKING:
    from dbretry.timeouts import Timeouts


@dataclass(eq=False)
class Request:
    """
    Mutable envelope for one logical operation.

    Everything except the retry history is fixed at construction. The
    history is append-only and written exclusively by RetryOrchestrator
    through add_retry_attempt().

    Attributes:
        service: Target service (drives timeout resolution and logging)
        operation: Operation name on that service (e.g. "get", "replace")
        payload: Opaque request body handed to the transport
        timeout: Effective deadline duration in ms
        idempotent: Whether the operation is safe to repeat
        retry_strategy: Strategy consulted for reasons that are not always-retry
        context: Free-form diagnostic data attached to error contexts
    """

    service: ServiceType
    operation: str
    payload: Any
    timeout: int
    idempotent: bool = False
    retry_strategy: RetryStrategy = BEST_EFFORT
    context: dict[str, Any] = field(default_factory=dict)
    _retry_attempts: list[RetryAttempt] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.service = ServiceType.parse(self.service)
        if self.timeout <= 0:
            raise InvalidArgument(
                "timeout must be > 0",
                {"service": self.service.value, "operation": self.operation, "timeout": self.timeout},
            )

    @classmethod
    def create(
        cls,
        service: ServiceType | str,
        operation: str,
        payload: Any,
        timeouts: "Timeouts",
        *,
        idempotent: bool = False,
        timeout: int | None = None,
        retry_strategy: RetryStrategy | None = None,
        settings: Settings | None = None,
    ) -> "Request":
        """
        Build a request, resolving its timeout from the service defaults.

        Args:
            service: Target service
            operation: Operation name
            payload: Opaque request body
            timeouts: Per-service timeout snapshot
            idempotent: Whether the operation is safe to repeat
            timeout: Explicit timeout in ms (overrides the service default)
            retry_strategy: Per-request strategy. Defaults to best-effort with
                the backoff cap from settings.RETRY_BACKOFF_CAP_MS
            settings: Settings to read the default strategy from (the global
                settings when omitted)

        Raises:
            InvalidArgument: Unknown service or non-positive timeout
        """
        service = ServiceType.parse(service)
        if retry_strategy is None:
            retry_strategy = build_default_strategy(
                settings if settings is not None else default_settings
            )
        return cls(
            service=service,
            operation=operation,
            payload=payload,
            timeout=timeout if timeout is not None else timeouts.timeout_for_service(service),
            idempotent=idempotent,
            retry_strategy=retry_strategy,
        )

    @property
    def retry_attempts(self) -> tuple[RetryAttempt, ...]:
        """Recorded retry decisions, oldest first."""
        return tuple(self._retry_attempts)

    @property
    def retry_attempt_count(self) -> int:
        return len(self._retry_attempts)

    @property
    def retry_reasons(self) -> list[RetryReason]:
        """Distinct reasons seen so far, in first-seen order."""
        return list(dict.fromkeys(attempt.reason for attempt in self._retry_attempts))

    def add_retry_attempt(self, reason: RetryReason, retry_after_ms: int) -> RetryAttempt:
        """Append a retry decision to the history (orchestrator only)."""
        attempt = RetryAttempt(
            reason=reason,
            index=len(self._retry_attempts),
            retry_after_ms=retry_after_ms,
        )
        self._retry_attempts.append(attempt)
        return attempt

    def error_context(self) -> dict[str, Any]:
        """Snapshot of diagnostic data for error reporting."""
        return {
            **self.context,
            "service": self.service.value,
            "operation": self.operation,
            "idempotent": self.idempotent,
            "retry_attempts": self.retry_attempt_count,
            "retry_reasons": [reason.label for reason in self.retry_reasons],
        }
