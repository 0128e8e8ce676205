"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from stream_relay.core.config.settings import StreamConfig  # noqa: E402
from stream_relay.infrastructure.monitoring.metrics_collector import MetricsCollector  # noqa: E402
from tests.test_fixtures.in_memory_queue import InMemoryQueue  # noqa: E402

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def stream_config():
    """English recentchange stream, 1s/1s/30s backoff."""
    return StreamConfig(
        WIKI_LANG="en",
        WIKI_STREAM="recentchange",
        WIKI_BACKOFF_START_MS=1000,
        WIKI_BACKOFF_INCREMENT_MS=1000,
        WIKI_BACKOFF_MAX_MS=30000,
    )


@pytest.fixture
def stream_env(monkeypatch):
    """Populate the process environment for StreamConfig/QueueConfig.from_env()."""
    env = {
        "WIKI_LANG": "en",
        "WIKI_STREAM": "recentchange",
        "WIKI_BACKOFF_START_MS": "1000",
        "WIKI_BACKOFF_INCREMENT_MS": "1000",
        "WIKI_BACKOFF_MAX_MS": "30000",
        "SQS_QUEUE_URL": "redis://localhost:6379/0/wiki-events",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


# ============================================================================
# Mock Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def mock_metrics():
    """MetricsCollector double; assert on record_* calls."""
    return MagicMock(spec=MetricsCollector)


@pytest.fixture
def recorded_sleeps():
    """
    Async sleep replacement that records requested delays.

    Usage:
        sleep, delays = recorded_sleeps
        QueueConsumer(queue, sleep=sleep)
    """
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    return sleep, delays


@pytest.fixture
def in_memory_queue():
    return InMemoryQueue()
