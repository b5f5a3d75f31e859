"""
Clients Package

This package provides the Redis client factory used by session handlers.
"""

from redis_session.clients.redis_client import create_redis_client

__all__ = ["create_redis_client"]
