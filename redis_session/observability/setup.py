"""
Observability Startup

Applies the logging and tracing fields of ``Settings`` in one call. Run it
once at application startup, before building handlers: loggers bind their
configuration when a handler is created.

Example:
    >>> configure_observability()
    >>> handler = SessionHandler.from_settings(create_redis_client())
"""

from typing import Optional, TextIO

from redis_session.core.config import Settings, get_settings
from redis_session.observability.logging import configure_logging
from redis_session.observability.tracing import setup_tracing


def configure_observability(
    settings: Optional[Settings] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure logging and tracing from settings.

    Logging runs at ``log_level`` and tags every event with ``service_name``.
    A tracer provider is installed only when ``otlp_endpoint`` is set;
    otherwise the global provider is left alone.

    Args:
        settings: Settings to apply (default: get_settings())
        stream: Log output stream (default: sys.stdout)
    """
    settings = settings or get_settings()

    configure_logging(
        level=settings.log_level,
        stream=stream,
        force=True,
        service_name=settings.service_name,
    )

    if settings.otlp_endpoint:
        setup_tracing(settings.service_name, settings.otlp_endpoint)
