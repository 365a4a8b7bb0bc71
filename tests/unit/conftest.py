"""Unit test fixtures (mocks and stubs).

Provides mock strategies for testing the orchestrator in isolation.
"""

import pytest
from unittest.mock import Mock

from dbretry.retry.strategies import RetryAction


@pytest.fixture
def mock_retry_strategy():
    """Mock RetryStrategy that always asks for a 7ms retry."""
    mock = Mock()
    mock.retry_after = Mock(return_value=RetryAction.with_duration(7))
    return mock


@pytest.fixture
def mock_refusing_strategy():
    """Mock RetryStrategy that never retries."""
    mock = Mock()
    mock.retry_after = Mock(return_value=RetryAction.no_retry())
    return mock
