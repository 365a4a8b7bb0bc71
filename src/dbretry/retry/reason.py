"""
Retry reasons.

A RetryReason classifies why an attempt failed. Every reason carries two
policy hints consumed by the orchestrator and the retry strategies:

- allows_non_idempotent_retry: the failure guarantees the attempt had no
  side effect, so even non-idempotent operations may be repeated.
- always_retry: the failure is a routing/topology race; it is retried
  unconditionally on the controlled backoff schedule, bypassing the
  request's retry strategy.
"""

from enum import Enum


class RetryReason(Enum):
    """
    Closed taxonomy of retry reasons.

    Member values are (label, allows_non_idempotent_retry, always_retry).
    New reasons are added here as named members, never constructed at runtime.
    """

    UNKNOWN = ("unknown", False, False)
    SOCKET_NOT_AVAILABLE = ("socket_not_available", True, False)
    SERVICE_NOT_AVAILABLE = ("service_not_available", True, False)
    NODE_NOT_AVAILABLE = ("node_not_available", True, False)
    KV_NOT_MY_VBUCKET = ("kv_not_my_vbucket", True, True)
    KV_COLLECTION_OUTDATED = ("kv_collection_outdated", True, True)
    KV_ERROR_MAP_RETRY_INDICATED = ("kv_error_map_retry_indicated", True, False)
    KV_LOCKED = ("kv_locked", True, False)
    KV_TEMPORARY_FAILURE = ("kv_temporary_failure", True, False)
    KV_SYNC_WRITE_IN_PROGRESS = ("kv_sync_write_in_progress", True, False)
    KV_SYNC_WRITE_RE_COMMIT_IN_PROGRESS = ("kv_sync_write_re_commit_in_progress", True, False)
    SERVICE_RESPONSE_CODE_INDICATED = ("service_response_code_indicated", True, False)
    # Socket dropped mid-flight: the write may have been applied
    SOCKET_CLOSED_WHILE_IN_FLIGHT = ("socket_closed_while_in_flight", False, False)
    CIRCUIT_BREAKER_OPEN = ("circuit_breaker_open", True, False)
    QUERY_PREPARED_STATEMENT_FAILURE = ("query_prepared_statement_failure", True, False)
    QUERY_INDEX_NOT_FOUND = ("query_index_not_found", True, False)
    ANALYTICS_TEMPORARY_FAILURE = ("analytics_temporary_failure", True, False)
    SEARCH_TOO_MANY_REQUESTS = ("search_too_many_requests", True, False)
    VIEWS_TEMPORARY_FAILURE = ("views_temporary_failure", True, False)
    VIEWS_NO_ACTIVE_PARTITION = ("views_no_active_partition", True, True)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def allows_non_idempotent_retry(self) -> bool:
        return self.value[1]

    @property
    def always_retry(self) -> bool:
        return self.value[2]

    def __str__(self) -> str:
        return self.label
