"""Custom Prometheus metrics for the request lifecycle layer.

These metrics are updated by the senders (never by the orchestrator, which
stays side-effect free). Alert rules should be configured for:
- request_retries_total (high retry rate indicates topology churn or contention)
- request_failures_total (terminal failures surfaced to callers)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

request_retries_total = Counter(
    "request_retries_total",
    "Total retry decisions by service and reason",
    ["service", "reason"],
)
"""
Retry decisions counter.

Labels:
- service: key_value, query, search, analytics, view, management, *_admin
- reason: RetryReason label (kv_locked, kv_not_my_vbucket, ...)

Alert thresholds:
- WARN: kv_not_my_vbucket rate sustained > 1/s (rebalance stuck?)
"""

retry_backoff_ms = Histogram(
    "retry_backoff_ms",
    "Backoff delay returned for retried attempts (ms)",
    ["service"],
    buckets=[1, 2, 4, 8, 16, 32, 50, 100, 500, 1000],
)
"""
Backoff histogram.

Buckets follow the best-effort doubling (1-50ms) and the controlled
backoff schedule (1, 10, 50, 100, 500, 1000ms).
"""

# === Failure Metrics ===

request_failures_total = Counter(
    "request_failures_total",
    "Total terminal request failures by service and error kind",
    ["service", "error_kind"],
)
"""
Terminal failures counter.

Labels:
- service: Target service
- error_kind: request_canceled, unambiguous_timeout, ambiguous_timeout

Alert thresholds:
- WARN: unambiguous_timeout rate > 1% of total requests
"""
