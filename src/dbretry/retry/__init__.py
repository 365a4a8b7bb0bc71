"""
Retry orchestration for remote operations.

This package decides, after every failed attempt, whether a request is
retried and after what delay:

1. **Reasons**: Closed taxonomy of failure causes with idempotency hints
2. **Strategies**: Pluggable per-request policy (best-effort backoff by default)
3. **Orchestrator**: Combines both into a retry-or-fail RequestBehaviour

Main Components:
    - RetryOrchestrator: Stateless decision function, sole writer of retry history
    - RetryStrategy: Protocol for implementing retry strategies
    - RetryReason: Why an attempt failed
    - RetryAttempt: One entry of a request's retry history

Usage:
    >>> from dbretry.retry import RetryOrchestrator, RetryReason
    >>> behaviour = RetryOrchestrator.decide(request, RetryReason.KV_LOCKED)
    >>> behaviour.retry_duration
    1
"""

from dbretry.retry.reason import RetryReason
from dbretry.retry.metadata import RetryAttempt
from dbretry.retry.strategies import (
    BEST_EFFORT,
    FAIL_FAST,
    BestEffortRetryStrategy,
    FailFastRetryStrategy,
    RetryAction,
    RetryStrategy,
    build_default_strategy,
    capped_exponential_backoff,
)
from dbretry.retry.orchestrator import CONTROLLED_BACKOFF_MS, RetryOrchestrator

__all__ = [
    "RetryOrchestrator",
    "RetryReason",
    "RetryAttempt",
    "RetryAction",
    "RetryStrategy",
    "BestEffortRetryStrategy",
    "FailFastRetryStrategy",
    "BEST_EFFORT",
    "FAIL_FAST",
    "CONTROLLED_BACKOFF_MS",
    "build_default_strategy",
    "capped_exponential_backoff",
]
