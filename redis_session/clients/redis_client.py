"""
Redis Client Module

This module provides the factory for the synchronous Redis client shared by
session handlers.

Pattern: Factory pattern for creating configured clients
Pattern: One connection pool per process, shared by every handler

The session lock spins on the calling thread, so the client is the blocking
redis-py client rather than redis.asyncio.
"""

from typing import Optional

import redis

from redis_session.core.config import Settings, get_settings


def create_redis_client(settings: Optional[Settings] = None) -> redis.Redis:
    """
    Create a pooled Redis client from settings.

    No connection is opened here; the pool connects lazily on the first
    command.

    Args:
        settings: Settings to read the URL and pool options from
            (default: get_settings())

    Returns:
        redis.Redis: Configured client

    Example:
        >>> client = create_redis_client()
        >>> handler = SessionHandler.from_settings(client)
    """
    settings = settings or get_settings()

    return redis.Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_pool_size,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )
