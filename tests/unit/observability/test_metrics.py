"""
Tests for Prometheus Metrics.

Counters are process-global, so every assertion compares against the value
read before the action.
"""

import pytest
from prometheus_client import REGISTRY


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def lock(fake_redis, no_sleep):
    from redis_session.sessions.lock import SessionLock

    return SessionLock(
        fake_redis, spin_lock_wait_micros=1000, lock_max_wait_micros=5000, sleep=no_sleep
    )


class TestMetricNames:
    """Metric names are exposed."""

    def test_generate_metrics_lists_collectors(self) -> None:
        from redis_session.observability.metrics import generate_metrics

        output = generate_metrics().decode("utf-8")

        assert "redis_session_lock_acquisitions_total" in output
        assert "redis_session_lock_wait_seconds" in output
        assert "redis_session_lock_releases_total" in output
        assert "redis_session_locks_held" in output
        assert "redis_session_operations_total" in output


class TestLockMetrics:
    """Lock operations update their collectors."""

    def test_acquire_and_release(self, lock) -> None:
        acquired = _sample("redis_session_lock_acquisitions_total", {"result": "acquired"})
        released = _sample("redis_session_lock_releases_total", {"result": "released"})
        held = _sample("redis_session_locks_held")
        waits = _sample("redis_session_lock_wait_seconds_count")

        lock.acquire("abc")

        assert _sample("redis_session_lock_acquisitions_total", {"result": "acquired"}) == acquired + 1
        assert _sample("redis_session_locks_held") == held + 1
        assert _sample("redis_session_lock_wait_seconds_count") == waits + 1

        lock.release()

        assert _sample("redis_session_lock_releases_total", {"result": "released"}) == released + 1
        assert _sample("redis_session_locks_held") == held

    def test_timeout_counted(self, lock, other_redis) -> None:
        from redis_session.core.exceptions import LockTimeoutError

        other_redis.set("session:abc.lock", "other", ex=60)
        before = _sample("redis_session_lock_acquisitions_total", {"result": "timeout"})

        with pytest.raises(LockTimeoutError):
            lock.acquire("abc")

        assert _sample("redis_session_lock_acquisitions_total", {"result": "timeout"}) == before + 1

    def test_ttl_missing_counted(self, lock, other_redis) -> None:
        from redis_session.core.exceptions import LockTtlMissingError

        other_redis.set("session:abc.lock", "1")
        before = _sample("redis_session_lock_acquisitions_total", {"result": "ttl_missing"})

        with pytest.raises(LockTtlMissingError):
            lock.acquire("abc")

        assert _sample("redis_session_lock_acquisitions_total", {"result": "ttl_missing"}) == before + 1

    def test_not_owner_release_counted(self, lock, fake_redis) -> None:
        before = _sample("redis_session_lock_releases_total", {"result": "not_owner"})
        lock.acquire("abc")
        fake_redis.delete("session:abc.lock")

        lock.release()

        assert _sample("redis_session_lock_releases_total", {"result": "not_owner"}) == before + 1


class TestSessionMetrics:
    """Session operations are counted."""

    def test_operations_counted(self, fake_redis, no_sleep) -> None:
        from redis_session.sessions.handler import SessionHandler

        handler = SessionHandler(fake_redis, sleep=no_sleep)
        before = {
            op: _sample("redis_session_operations_total", {"operation": op})
            for op in ("read", "write", "destroy")
        }

        handler.write("abc", "X")
        handler.read("abc")
        handler.destroy("abc")

        for op in ("read", "write", "destroy"):
            assert _sample("redis_session_operations_total", {"operation": op}) == before[op] + 1
