"""
Pytest configuration for the test suite.

This configuration sets up:
- Test discovery paths
- Shared fixtures: fakeredis clients, handlers with fast lock timings
- Test markers for categorization
"""

import sys
from pathlib import Path

import fakeredis
import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Tests for individual components
    - integration: Multi-handler tests sharing one fake Redis server
    - slow: Tests that take a long time to run
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across handlers")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


# =============================================================================
# FakeRedis Fixtures
# =============================================================================


@pytest.fixture
def fake_server():
    """
    Shared fake Redis server.

    Every client built on the same server sees the same keyspace, which is
    how separate processes see one real Redis.
    """
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(fake_server):
    """
    Create a fake Redis client for testing.

    Returns:
        FakeRedis: A fake Redis client with decode_responses=True
    """
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture
def other_redis(fake_server):
    """A second client on the same server, standing in for another process."""
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


class SleepRecorder:
    """Sleep double that records requested durations instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def no_sleep():
    """Sleep function that returns immediately and records each call."""
    return SleepRecorder()


# =============================================================================
# Test Settings Fixture
# =============================================================================


@pytest.fixture
def test_settings():
    """
    Create test settings with fast lock timings.

    Returns:
        Settings: Configured settings for testing
    """
    from redis_session.core.config import Settings

    return Settings(
        redis_url="redis://localhost:6379",
        redis_pool_size=5,
        session_prefix="session",
        session_ttl_seconds=3600,
        spin_lock_wait_micros=1000,
        lock_max_wait_micros=5000,
    )
