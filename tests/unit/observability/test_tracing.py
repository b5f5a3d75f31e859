"""
Tests for OpenTelemetry span helpers.

Spans are collected with an in-memory exporter on a local TracerProvider, so
the global provider is never replaced.
"""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider.get_tracer("redis_session.test")


class TestCreateSpan:
    """Tests for create_span()."""

    def test_span_has_name_and_attributes(self, tracer, exporter) -> None:
        from redis_session.observability.tracing import create_span

        with create_span("session_lock.acquire", {"lock.key": "session:abc.lock"}, tracer=tracer) as span:
            span.set_attribute("lock.attempts", 1)

        (finished,) = exporter.get_finished_spans()
        assert finished.name == "session_lock.acquire"
        assert finished.attributes["lock.key"] == "session:abc.lock"
        assert finished.attributes["lock.attempts"] == 1

    def test_exception_marks_span_as_error(self, tracer, exporter) -> None:
        from redis_session.observability.tracing import create_span

        with pytest.raises(ValueError):
            with create_span("session_lock.acquire", tracer=tracer):
                raise ValueError("boom")

        (finished,) = exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR
        assert any(event.name == "exception" for event in finished.events)

    def test_default_tracer_works_without_setup(self) -> None:
        from redis_session.observability.tracing import create_span, get_tracer

        assert get_tracer("redis_session") is not None
        with create_span("noop") as span:
            span.set_attribute("k", "v")
