"""
Session Handler - lock-guarded session storage in Redis.

This module provides the read/write/destroy lifecycle of a session on top of
``SessionLock``. The lock is taken on the first read (or write) of a session
and held until ``close()`` or ``destroy()``, so one read-modify-write cycle
runs without interference from other processes.

Pattern: Repository pattern for session data
Pattern: Dependency injection for Redis client

A handler serves one session at a time. Use ``session()`` (or the handler as
a context manager) so the lock is released on every exit path:

    >>> handler = SessionHandler(redis_client, ttl=3600)
    >>> with handler.session("abc"):
    ...     payload = handler.read("abc")
    ...     handler.write("abc", payload + "x")
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union

from redis import Redis

from redis_session.core.config import (
    DEFAULT_LOCK_MAX_WAIT_MICROS,
    DEFAULT_SESSION_PREFIX,
    DEFAULT_SPIN_LOCK_WAIT_MICROS,
    Settings,
    get_settings,
)
from redis_session.core.exceptions import SessionValidationError, StoreError
from redis_session.observability.logging import get_logger, session_id_context
from redis_session.observability.metrics import record_session_operation
from redis_session.sessions import keys
from redis_session.sessions.lock import SessionLock


Payload = Union[str, bytes]

EMPTY_PAYLOAD: str = ""
"""Returned by read() for a session with no stored data."""


class SessionHandler:
    """
    Redis-backed session storage with a per-session exclusive lock.

    Attributes:
        _redis: The Redis client instance.
        _prefix: Prefix for session keys.
        _ttl: Session data TTL in seconds, None for no expiry.
        _lock: The lock handle guarding the current session.
    """

    def __init__(
        self,
        redis_client: Redis,
        prefix: str = DEFAULT_SESSION_PREFIX,
        ttl: Optional[int] = None,
        spin_lock_wait_micros: int = DEFAULT_SPIN_LOCK_WAIT_MICROS,
        lock_max_wait_micros: int = DEFAULT_LOCK_MAX_WAIT_MICROS,
        read_only: bool = False,
        strict_release: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize SessionHandler with Redis client.

        Args:
            redis_client: Synchronous Redis client instance.
            prefix: Prefix for all session keys in Redis.
            ttl: Session data TTL in seconds (None = keys never expire).
            spin_lock_wait_micros: Pause between two lock attempts, in µs.
            lock_max_wait_micros: Maximum time to wait for the lock, in µs.
            read_only: Never lock, and silently skip writes.
            strict_release: Only delete the lock key if it still holds our token.
            sleep: Sleep function used between lock attempts.

        Raises:
            SessionValidationError: If ttl or the lock wait values are invalid.
        """
        if ttl is not None and ttl <= 0:
            raise SessionValidationError(
                "ttl must be a positive number of seconds or None",
                field="ttl",
                value=ttl,
            )

        self._redis: Redis = redis_client
        self._prefix: str = prefix
        self._ttl: Optional[int] = ttl
        self._lock = SessionLock(
            redis_client,
            prefix=prefix,
            spin_lock_wait_micros=spin_lock_wait_micros,
            lock_max_wait_micros=lock_max_wait_micros,
            read_only=read_only,
            strict_release=strict_release,
            sleep=sleep,
        )
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        redis_client: Redis,
        settings: Optional[Settings] = None,
    ) -> "SessionHandler":
        """
        Build a handler from application settings.

        Only the session and lock fields are read here. Call
        ``configure_observability(settings)`` once at startup to apply the
        logging and tracing fields.

        Args:
            redis_client: Synchronous Redis client instance.
            settings: Settings to use (default: get_settings()).

        Returns:
            Configured SessionHandler.
        """
        settings = settings or get_settings()
        return cls(
            redis_client,
            prefix=settings.session_prefix,
            ttl=settings.session_ttl_seconds,
            spin_lock_wait_micros=settings.spin_lock_wait_micros,
            lock_max_wait_micros=settings.lock_max_wait_micros,
            read_only=settings.read_only,
            strict_release=settings.strict_release,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def lock(self) -> SessionLock:
        return self._lock

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def ttl(self) -> Optional[int]:
        return self._ttl

    @property
    def read_only(self) -> bool:
        return self._lock.read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self._lock.read_only = value

    def data_key(self, session_id: str) -> str:
        """Redis key of a session's payload."""
        return keys.data_key(self._prefix, session_id)

    def lock_key(self, session_id: str) -> str:
        """Redis key of a session's lock."""
        return keys.lock_key(self._prefix, session_id)

    # =========================================================================
    # Session Lifecycle
    # =========================================================================

    def open(self, save_path: str = "", session_name: str = "") -> bool:
        """Nothing to prepare; the Redis client is already configured."""
        return True

    def read(self, session_id: str) -> Payload:
        """
        Lock the session and return its payload.

        The lock stays held after this returns; it is released by close()
        or destroy().

        Args:
            session_id: The session's unique identifier.

        Returns:
            The stored payload, or EMPTY_PAYLOAD for a session never written.

        Raises:
            SessionLockError: If the lock cannot be acquired.
            StoreError: If Redis fails.
        """
        with session_id_context(session_id):
            self._lock.acquire(session_id)
            data = self._redis.get(self.data_key(session_id))
            record_session_operation("read")

        if data is None:
            return EMPTY_PAYLOAD
        return data

    def write(self, session_id: str, data: Payload) -> bool:
        """
        Lock the session (if not yet locked) and store its payload.

        In read-only mode nothing is locked or written and True is returned.

        Args:
            session_id: The session's unique identifier.
            data: Payload to store.

        Returns:
            True if Redis accepted the write.

        Raises:
            SessionLockError: If the lock cannot be acquired.
            StoreError: If Redis fails.
        """
        if self.read_only:
            return True

        with session_id_context(session_id):
            self._lock.acquire(session_id)

            key = self.data_key(session_id)
            if self._ttl is None:
                result = self._redis.set(key, data)
            else:
                result = self._redis.setex(key, self._ttl, data)
            record_session_operation("write")

        return bool(result)

    def destroy(self, session_id: str) -> bool:
        """
        Delete a session's payload and release the lock.

        The lock is released even if the delete fails; the delete error is
        then the one raised. Deleting a session that does not exist is not
        an error.

        Returns:
            True

        Raises:
            StoreError: If Redis fails.
        """
        with session_id_context(session_id):
            try:
                self._redis.delete(self.data_key(session_id))
            except Exception:
                self._close_after_failure()
                raise
            record_session_operation("destroy")
            self._logger.debug("session destroyed")
            self.close()

        return True

    def gc(self, max_lifetime: int) -> bool:
        """Expired sessions are evicted by Redis TTLs; nothing to collect."""
        return True

    def close(self) -> bool:
        """Release the session lock, if held. Safe to call repeatedly."""
        self._lock.release()
        return True

    @contextmanager
    def session(self, session_id: str) -> Iterator["SessionHandler"]:
        """
        Open a session, lock it, and close it when the block exits.

        Example:
            >>> with handler.session("abc") as h:
            ...     h.write("abc", "payload")
        """
        self.open()
        try:
            self._lock.acquire(session_id)
            yield self
        finally:
            self.close()

    def __enter__(self) -> "SessionHandler":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _close_after_failure(self) -> None:
        """Release the lock while another error is propagating."""
        try:
            self.close()
        except StoreError as e:
            self._logger.error("session lock release failed", error=str(e))
