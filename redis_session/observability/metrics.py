"""
Prometheus Metrics Module

This module provides Prometheus metrics for the session lock and the
session handler.

Metrics Provided:
- Lock acquisitions by result (counter)
- Lock wait time (histogram)
- Lock releases by result (counter)
- Locks currently held by this process (gauge)
- Session operations (counter)

Label values are bounded enums; session IDs and keys are never used as
labels.
"""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, generate_latest

# =============================================================================
# Constants
# =============================================================================

METRIC_LOCK_ACQUISITIONS = "redis_session_lock_acquisitions_total"
METRIC_LOCK_WAIT = "redis_session_lock_wait_seconds"
METRIC_LOCK_RELEASES = "redis_session_lock_releases_total"
METRIC_LOCKS_HELD = "redis_session_locks_held"
METRIC_SESSION_OPERATIONS = "redis_session_operations_total"

ACQUIRE_RESULTS = ("acquired", "timeout", "ttl_missing")
RELEASE_RESULTS = ("released", "not_owner")
SESSION_OPERATIONS = ("read", "write", "destroy")


# =============================================================================
# Lock Metrics
# =============================================================================

LOCK_ACQUISITIONS_TOTAL = Counter(
    name=METRIC_LOCK_ACQUISITIONS,
    documentation="Total session lock acquisitions by result",
    labelnames=["result"],
)

LOCK_WAIT_SECONDS = Histogram(
    name=METRIC_LOCK_WAIT,
    documentation="Time spent acquiring a session lock in seconds",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.15, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

LOCK_RELEASES_TOTAL = Counter(
    name=METRIC_LOCK_RELEASES,
    documentation="Total session lock releases by result",
    labelnames=["result"],
)

LOCKS_HELD = Gauge(
    name=METRIC_LOCKS_HELD,
    documentation="Number of session locks currently held by this process",
)

# =============================================================================
# Session Metrics
# =============================================================================

SESSION_OPERATIONS_TOTAL = Counter(
    name=METRIC_SESSION_OPERATIONS,
    documentation="Total session store operations",
    labelnames=["operation"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_lock_acquisition(result: str, wait_seconds: float) -> None:
    """
    Record the outcome of a lock acquisition.

    Args:
        result: One of "acquired", "timeout", "ttl_missing"
        wait_seconds: Time spent in the acquisition loop
    """
    LOCK_ACQUISITIONS_TOTAL.labels(result=result).inc()
    LOCK_WAIT_SECONDS.observe(wait_seconds)
    if result == "acquired":
        LOCKS_HELD.inc()


def record_lock_release(result: str) -> None:
    """
    Record a lock release.

    Args:
        result: "released" when the key was deleted, "not_owner" when the
            key had expired or belonged to another holder
    """
    LOCK_RELEASES_TOTAL.labels(result=result).inc()


def record_lock_dropped() -> None:
    """Record that this process no longer tracks a lock it had acquired."""
    LOCKS_HELD.dec()


def record_session_operation(operation: str) -> None:
    """
    Record a session store operation.

    Args:
        operation: One of "read", "write", "destroy"
    """
    SESSION_OPERATIONS_TOTAL.labels(operation=operation).inc()


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)
