"""
OpenTelemetry Tracing Module

This module provides tracing for session lock and session store calls.

Pattern: Distributed tracing for observability

A span is opened around every lock acquisition so that long spin waits
show up next to the request that triggered them.
"""

from contextlib import contextmanager
from typing import Any, Generator, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, Tracer


_tracer_provider: Optional[TracerProvider] = None


# =============================================================================
# TracerProvider Configuration
# =============================================================================


def setup_tracing(
    service_name: str = "redis-session-handler",
    otlp_endpoint: Optional[str] = None,
) -> TracerProvider:
    """
    Configure OpenTelemetry TracerProvider.

    Args:
        service_name: Name of the service for resource identification
        otlp_endpoint: Optional OTLP exporter endpoint (http://localhost:4317)

    Returns:
        Configured TracerProvider
    """
    global _tracer_provider

    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )

            exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        except ImportError:
            # OTLP exporter is an optional extra
            exporter = ConsoleSpanExporter()
    else:
        exporter = ConsoleSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider

    return provider


def get_tracer(name: str = __name__) -> Tracer:
    """
    Get a named tracer instance.

    Args:
        name: Name for the tracer (typically module name)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)


# =============================================================================
# Span Creation Helpers
# =============================================================================


@contextmanager
def create_span(
    name: str,
    attributes: Optional[dict[str, Any]] = None,
    tracer: Optional[Tracer] = None,
) -> Generator[Span, None, None]:
    """
    Context manager for creating a span.

    Exceptions raised inside the block are recorded on the span, which is
    marked as errored, and then propagate unchanged.

    Args:
        name: Span name
        attributes: Optional span attributes
        tracer: Tracer to use (default: the redis_session tracer)

    Yields:
        The active span

    Example:
        >>> with create_span("session_lock.acquire", {"lock.key": key}) as span:
        ...     span.set_attribute("lock.attempts", 3)
    """
    tracer = tracer or get_tracer("redis_session")

    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        yield span
