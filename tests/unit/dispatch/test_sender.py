"""
Unit tests for RequestSender and AsyncRequestSender.

A fake clock stands in for time.monotonic and the sleep functions, so
backoff waits are recorded instead of performed.
"""

import pytest
import structlog
from prometheus_client import REGISTRY

from dbretry.config import Settings
from dbretry.dispatch.exceptions import (
    TransportCancelled,
    TransportDeadlineExceeded,
    TransportError,
)
from dbretry.dispatch.sender import AsyncRequestSender, RequestSender
from dbretry.exceptions import AmbiguousTimeout, RequestCanceled, UnambiguousTimeout
from dbretry.models.enums import ServiceType
from dbretry.retry.reason import RetryReason


def locked() -> TransportError:
    return TransportError("Document locked", RetryReason.KV_LOCKED)


def temporary_failure() -> TransportError:
    return TransportError("Temporary failure", RetryReason.KV_TEMPORARY_FAILURE)


def sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture
def sender(test_settings, fake_clock) -> RequestSender:
    return RequestSender(test_settings, clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def async_sender(test_settings, fake_clock) -> AsyncRequestSender:
    return AsyncRequestSender(test_settings, clock=fake_clock, sleep=fake_clock.async_sleep)


# ============================================================================
# RequestSender Tests
# ============================================================================


def test_send_success_first_attempt(sender, fake_clock, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True, timeout=2_500)
    transport = scripted_transport(["ok"])

    result = sender.send(request, transport)

    assert result == "ok"
    assert transport.calls == [2_500]
    assert fake_clock.sleeps == []
    assert request.retry_attempt_count == 0


def test_send_retries_then_succeeds(sender, fake_clock, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True)
    transport = scripted_transport([locked(), temporary_failure(), {"cas": 42}])

    result = sender.send(request, transport)

    assert result == {"cas": 42}
    assert fake_clock.sleeps_ms == [1, 2]
    assert request.retry_attempt_count == 2
    assert len(transport.calls) == 3


def test_send_passes_shrinking_budget(sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True, timeout=1_000)
    transport = scripted_transport([locked(), locked(), "ok"], latency_ms=100)

    sender.send(request, transport)

    first, second, third = transport.calls
    assert first == 1_000
    assert 890 <= second < first
    assert 780 <= third < second


def test_send_non_idempotent_unknown_raises_request_canceled(
    sender, fake_clock, scripted_transport, create_test_request
):
    request = create_test_request(idempotent=False, operation="increment")
    cause = TransportError("Connection reset")
    transport = scripted_transport([cause])

    with pytest.raises(RequestCanceled) as exc_info:
        sender.send(request, transport)

    assert exc_info.value.__cause__ is cause
    assert exc_info.value.context["operation"] == "increment"
    assert exc_info.value.context["last_reason"] == "unknown"
    assert fake_clock.sleeps == []


def test_send_non_transport_errors_propagate(sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True)
    transport = scripted_transport([KeyError("decode failure")])

    with pytest.raises(KeyError):
        sender.send(request, transport)

    assert request.retry_attempt_count == 0


def test_send_cancelled(sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True)

    with pytest.raises(RequestCanceled):
        sender.send(request, scripted_transport([TransportCancelled("shutdown")]))


@pytest.mark.parametrize(
    "idempotent,expected", [(True, UnambiguousTimeout), (False, AmbiguousTimeout)]
)
def test_send_deadline_exceeded_in_flight(
    sender, scripted_transport, create_test_request, idempotent, expected
):
    request = create_test_request(idempotent=idempotent)

    with pytest.raises(expected):
        sender.send(request, scripted_transport([TransportDeadlineExceeded("deadline")]))


# ============================================================================
# Deadline handling
# ============================================================================


def test_send_aborts_when_backoff_would_exceed_deadline(
    sender, fake_clock, scripted_transport, create_test_request
):
    """Best-effort retries stop once the next delay does not fit the budget."""
    request = create_test_request(idempotent=True, timeout=2_500)
    transport = scripted_transport([temporary_failure() for _ in range(200)])

    with pytest.raises(UnambiguousTimeout) as exc_info:
        sender.send(request, transport)

    context = exc_info.value.context
    assert context["retry_after_ms"] == 50
    assert context["remaining_ms"] < 50
    assert sum(fake_clock.sleeps_ms) <= 2_500
    assert max(fake_clock.sleeps_ms) == 50
    # The converted decision was still recorded by the orchestrator
    assert request.retry_attempt_count == len(fake_clock.sleeps) + 1


def test_send_retries_indefinitely_within_budget(
    sender, fake_clock, scripted_transport, create_test_request
):
    """No attempt limit: only the deadline stops best-effort retries."""
    request = create_test_request(idempotent=True, timeout=1_000_000)
    transport = scripted_transport([temporary_failure() for _ in range(300)] + ["ok"])

    assert sender.send(request, transport) == "ok"
    assert request.retry_attempt_count == 300
    assert all(delay <= 50 for delay in fake_clock.sleeps_ms)


def test_send_controlled_backoff_hits_deadline(
    sender, fake_clock, scripted_transport, create_test_request
):
    """Always-retry reasons are also bounded by the request deadline."""
    request = create_test_request(idempotent=False, timeout=200)
    transport = scripted_transport(
        [TransportError("Not my vbucket", RetryReason.KV_NOT_MY_VBUCKET) for _ in range(10)]
    )

    with pytest.raises(UnambiguousTimeout):
        sender.send(request, transport)

    assert fake_clock.sleeps_ms == [1, 10, 50, 100]


def test_send_budget_spent_before_attempt(test_settings, fake_clock, scripted_transport, create_test_request):
    def oversleep(seconds: float) -> None:
        fake_clock.advance_ms(500)

    sender = RequestSender(test_settings, clock=fake_clock, sleep=oversleep)
    request = create_test_request(idempotent=True, timeout=100)
    transport = scripted_transport([locked(), "ok"])

    with pytest.raises(UnambiguousTimeout, match="before the next attempt"):
        sender.send(request, transport)

    assert len(transport.calls) == 1


# ============================================================================
# Observability
# ============================================================================


def test_send_logs_retries_and_failures(sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=False, operation="append")
    transport = scripted_transport([locked(), TransportError("socket closed", RetryReason.SOCKET_CLOSED_WHILE_IN_FLIGHT)])

    with structlog.testing.capture_logs() as logs:
        with pytest.raises(RequestCanceled):
            sender.send(request, transport)

    retry_logs = [entry for entry in logs if entry["event"] == "Retrying request"]
    failure_logs = [entry for entry in logs if entry["event"] == "Request failed"]
    assert retry_logs[0]["reason"] == "kv_locked"
    assert retry_logs[0]["retry_after_ms"] == 1
    assert failure_logs[0]["error_kind"] == "request_canceled"
    assert failure_logs[0]["retry_reasons"] == ["kv_locked"]


def test_send_binds_request_log_context(sender, create_test_request):
    request = create_test_request(idempotent=True, service=ServiceType.QUERY, operation="query")
    seen = []

    def transport(req, remaining_ms):
        seen.append(structlog.contextvars.get_contextvars())
        return "rows"

    sender.send(request, transport)

    assert seen == [{"service": "query", "operation": "query", "idempotent": True}]
    assert "service" not in structlog.contextvars.get_contextvars()


def test_send_updates_metrics_when_enabled(fake_clock, scripted_transport, create_test_request):
    sender = RequestSender(Settings(PROMETHEUS_ENABLED=True), clock=fake_clock, sleep=fake_clock.sleep)
    request = create_test_request(idempotent=False, service=ServiceType.ANALYTICS, operation="analytics_query")
    retry_labels = {"service": "analytics", "reason": "analytics_temporary_failure"}
    failure_labels = {"service": "analytics", "error_kind": "request_canceled"}
    retries_before = sample("request_retries_total", retry_labels)
    failures_before = sample("request_failures_total", failure_labels)

    transport = scripted_transport(
        [
            TransportError("busy", RetryReason.ANALYTICS_TEMPORARY_FAILURE),
            TransportError("busy", RetryReason.ANALYTICS_TEMPORARY_FAILURE),
            TransportError("unknown"),
        ]
    )
    with pytest.raises(RequestCanceled):
        sender.send(request, transport)

    assert sample("request_retries_total", retry_labels) == retries_before + 2
    assert sample("request_failures_total", failure_labels) == failures_before + 1


def test_send_skips_metrics_when_disabled(sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True, service=ServiceType.VIEW, operation="view_query")
    labels = {"service": "view", "reason": "views_temporary_failure"}
    before = sample("request_retries_total", labels)

    sender.send(
        request,
        scripted_transport([TransportError("busy", RetryReason.VIEWS_TEMPORARY_FAILURE), "rows"]),
    )

    assert sample("request_retries_total", labels) == before


# ============================================================================
# AsyncRequestSender Tests
# ============================================================================


@pytest.mark.asyncio
async def test_async_send_retries_then_succeeds(
    async_sender, fake_clock, scripted_transport, create_test_request
):
    request = create_test_request(idempotent=True)
    transport = scripted_transport([locked(), locked(), locked(), "ok"])

    result = await async_sender.send(request, transport.call_async)

    assert result == "ok"
    assert fake_clock.sleeps_ms == [1, 2, 4]


@pytest.mark.asyncio
async def test_async_send_non_idempotent_fails(async_sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=False)
    transport = scripted_transport([TransportError("socket closed", RetryReason.SOCKET_CLOSED_WHILE_IN_FLIGHT)])

    with pytest.raises(RequestCanceled):
        await async_sender.send(request, transport.call_async)


@pytest.mark.asyncio
async def test_async_send_deadline(async_sender, scripted_transport, create_test_request):
    request = create_test_request(idempotent=True, timeout=30)
    transport = scripted_transport([temporary_failure() for _ in range(20)])

    with pytest.raises(UnambiguousTimeout):
        await async_sender.send(request, transport.call_async)

    # 1 + 2 + 4 + 8 = 15ms slept, next delay 16 >= 15 remaining
    assert request.retry_attempt_count == 5
