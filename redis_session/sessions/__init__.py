"""
Sessions Package

This package provides Redis session storage guarded by a per-session
distributed spin lock.

- keys: data and lock key derivation
- lock: SessionLock (acquire / release / hold)
- handler: SessionHandler (open / read / write / destroy / gc / close)
- aio: AsyncSessionHandler for asyncio callers
"""

from redis_session.sessions.aio import AsyncSessionHandler
from redis_session.sessions.handler import EMPTY_PAYLOAD, SessionHandler
from redis_session.sessions.keys import LOCK_KEY_SUFFIX, data_key, lock_key
from redis_session.sessions.lock import SessionLock

__all__ = [
    "SessionLock",
    "SessionHandler",
    "AsyncSessionHandler",
    "EMPTY_PAYLOAD",
    "LOCK_KEY_SUFFIX",
    "data_key",
    "lock_key",
]
