"""
Observability Package

This package provides observability infrastructure including:
- Structured JSON logging
- Prometheus metrics
- OpenTelemetry tracing
- configure_observability(), the startup call that applies Settings
"""

from redis_session.observability.logging import (
    configure_logging,
    get_logger,
    get_session_id,
    session_id_context,
)

from redis_session.observability.metrics import (
    generate_metrics,
    record_lock_acquisition,
    record_lock_dropped,
    record_lock_release,
    record_session_operation,
)

from redis_session.observability.tracing import (
    create_span,
    get_tracer,
    setup_tracing,
)

from redis_session.observability.setup import configure_observability

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_session_id",
    "session_id_context",
    # Metrics
    "generate_metrics",
    "record_lock_acquisition",
    "record_lock_dropped",
    "record_lock_release",
    "record_session_operation",
    # Tracing
    "setup_tracing",
    "get_tracer",
    "create_span",
    # Startup
    "configure_observability",
]
