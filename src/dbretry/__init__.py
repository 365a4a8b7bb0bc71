"""
Request lifecycle and retry orchestration for a database client.

Decides, for every failed attempt of an outbound remote operation, whether
the operation is retried and after what delay, or whether the failure is
surfaced to the caller:
- Retry reasons (closed taxonomy with idempotency hints)
- Pluggable retry strategies (best-effort exponential backoff by default)
- Per-service timeout defaults (key-value, view, query, analytics, search, management)
- Sync and async senders that own the deadline and the backoff wait

Architecture: Request envelope + stateless RetryOrchestrator + transport-agnostic senders

Applications that want the client's structured logs call configure_logging()
once at startup; without it events go to whatever structlog is configured for.
"""

from dbretry.logging_config import configure_logging

__version__ = "0.1.0"

__all__ = ["configure_logging", "__version__"]
