"""Monitoring and metrics instrumentation for the request lifecycle layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from dbretry.monitoring.metrics import (
    request_failures_total,
    request_retries_total,
    retry_backoff_ms,
)

__all__ = [
    "request_retries_total",
    "request_failures_total",
    "retry_backoff_ms",
]
