"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from dbretry.config import Settings
from dbretry.models.enums import ServiceType
from dbretry.models.request import Request
from dbretry.retry.strategies import RetryStrategy
from dbretry.timeouts import Timeouts


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.QUERY_TIMEOUT_MS = 1_000
    """
    return Settings(
        # === Application ===
        APP_NAME="dbretry (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry ===
        RETRY_BACKOFF_CAP_MS=50,

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def timeouts() -> Timeouts:
    """Timeouts snapshot with built-in defaults only."""
    return Timeouts.from_configuration({})


@pytest.fixture
def create_test_request(timeouts: Timeouts):
    """Factory fixture to create a Request with custom idempotency/strategy.

    Usage:
        def test_something(create_test_request):
            request = create_test_request(idempotent=True)
    """
    def _create(
        idempotent: bool = False,
        service: ServiceType | str = ServiceType.KV,
        operation: str = "replace",
        payload: object = None,
        timeout: int | None = None,
        retry_strategy: RetryStrategy | None = None,
    ) -> Request:
        return Request.create(
            service,
            operation,
            payload if payload is not None else {"key": "a_key", "content": {"foo": "bar"}},
            timeouts,
            idempotent=idempotent,
            timeout=timeout,
            retry_strategy=retry_strategy,
        )

    return _create


class FakeClock:
    """Monotonic clock advanced only by (fake) sleeps."""

    def __init__(self, start: float = 1_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    async def async_sleep(self, seconds: float) -> None:
        self.sleep(seconds)

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000

    @property
    def sleeps_ms(self) -> list[int]:
        return [round(s * 1000) for s in self.sleeps]


@pytest.fixture
def fake_clock() -> FakeClock:
    """Fresh fake clock per test (senders never actually wait)."""
    return FakeClock()


class ScriptedTransport:
    """Transport replaying a fixed script of outcomes.

    Each script entry is either an exception instance (raised) or a value
    (returned). Every call records the remaining budget it was given.
    """

    def __init__(self, script: list, clock: FakeClock | None = None, latency_ms: int = 0):
        self.script = list(script)
        self.clock = clock
        self.latency_ms = latency_ms
        self.calls: list[int] = []

    def __call__(self, request: Request, remaining_ms: int):
        self.calls.append(remaining_ms)
        if self.clock is not None and self.latency_ms:
            self.clock.advance_ms(self.latency_ms)
        outcome = self.script.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def call_async(self, request: Request, remaining_ms: int):
        return self(request, remaining_ms)


@pytest.fixture
def scripted_transport(fake_clock: FakeClock):
    """Factory fixture building a ScriptedTransport bound to the fake clock.

    Usage:
        transport = scripted_transport([TransportError("x", RetryReason.KV_LOCKED), "ok"])
    """
    def _create(script: list, latency_ms: int = 0) -> ScriptedTransport:
        return ScriptedTransport(script, clock=fake_clock, latency_ms=latency_ms)

    return _create
