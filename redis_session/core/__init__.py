"""
Core module for the Redis session handler.

This module contains configuration and exceptions.
"""

from redis_session.core.config import Settings, get_settings
from redis_session.core.exceptions import (
    ErrorCode,
    LockTimeoutError,
    LockTtlMissingError,
    SessionHandlerException,
    SessionLockError,
    SessionValidationError,
    StoreError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "SessionHandlerException",
    "SessionLockError",
    "LockTimeoutError",
    "LockTtlMissingError",
    "SessionValidationError",
    "StoreError",
]
