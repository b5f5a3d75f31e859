"""Redis Session Handler - session storage with a distributed per-session lock."""

from redis_session.core.exceptions import (
    LockTimeoutError,
    LockTtlMissingError,
    SessionLockError,
    StoreError,
)
from redis_session.sessions import AsyncSessionHandler, SessionHandler, SessionLock

__version__ = "0.1.0"

__all__ = [
    "SessionHandler",
    "SessionLock",
    "AsyncSessionHandler",
    "SessionLockError",
    "LockTimeoutError",
    "LockTtlMissingError",
    "StoreError",
]
