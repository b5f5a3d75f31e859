"""
Session Lock - Redis spin lock guarding one session.

A lock is the key ``<prefix>:<session_id>.lock``: present means held, absent
means free. Acquisition polls ``SET key token NX EX ttl`` every
``spin_lock_wait_micros`` until it succeeds or ``lock_max_wait_micros`` is
spent. The key always carries an expiry of the wait budget plus one second,
so a holder that dies without releasing blocks others for a bounded time.

Mutual exclusion between processes rests entirely on the atomicity of
``SET NX`` on the Redis server. Waiters are not queued: whichever attempt
lands first after a release wins.

Pattern: Explicit lock handle owned by the caller (no module-level state)
Pattern: Scoped acquisition via ``hold()`` (release in ``finally``)
Reference: https://redis.io/docs/latest/commands/set/ (NX, EX options)
Reference: https://redis.io/docs/latest/develop/use/patterns/distributed-locks/

Release deletes the key only if it still holds this handle's token (Lua
compare-and-delete). With ``strict_release=False`` it falls back to a plain
``DEL``, which can delete another holder's lock if ours expired first.

``acquire()`` blocks the calling thread. Asyncio callers should go through
``redis_session.sessions.aio.AsyncSessionHandler``.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional
from uuid import uuid4

from redis import Redis
from redis.commands.core import Script

from redis_session.core.config import (
    DEFAULT_LOCK_MAX_WAIT_MICROS,
    DEFAULT_SESSION_PREFIX,
    DEFAULT_SPIN_LOCK_WAIT_MICROS,
)
from redis_session.core.exceptions import (
    LockTimeoutError,
    LockTtlMissingError,
    SessionValidationError,
)
from redis_session.observability.logging import get_logger
from redis_session.observability.metrics import (
    record_lock_acquisition,
    record_lock_dropped,
    record_lock_release,
)
from redis_session.observability.tracing import create_span
from redis_session.sessions.keys import lock_key


MICROS_PER_SECOND = 1_000_000

# Delete KEYS[1] only while it still holds our token (ARGV[1]).
RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def _validate_wait(spin_lock_wait_micros: int, lock_max_wait_micros: int) -> None:
    if spin_lock_wait_micros <= 0:
        raise SessionValidationError(
            "spin_lock_wait_micros must be positive",
            field="spin_lock_wait_micros",
            value=spin_lock_wait_micros,
        )
    if lock_max_wait_micros <= 0:
        raise SessionValidationError(
            "lock_max_wait_micros must be positive",
            field="lock_max_wait_micros",
            value=lock_max_wait_micros,
        )
    if lock_max_wait_micros < spin_lock_wait_micros:
        raise SessionValidationError(
            "lock_max_wait_micros must be greater than or equal to spin_lock_wait_micros",
            field="lock_max_wait_micros",
            value=lock_max_wait_micros,
        )


class SessionLock:
    """
    Exclusive lock on one session at a time.

    One instance tracks at most one held lock. ``acquire()`` is a no-op while
    a lock is held or in read-only mode; ``release()`` is a no-op when
    nothing is held.

    Attributes:
        _redis: The Redis client instance.
        _prefix: Prefix for session keys.
        _lock_key: Key of the held lock, None when not held.
        _token: Value written to the held lock key.

    Example:
        >>> lock = SessionLock(redis_client, spin_lock_wait_micros=1000)
        >>> with lock.hold("abc"):
        ...     payload = redis_client.get("session:abc")
    """

    def __init__(
        self,
        redis_client: Redis,
        prefix: str = DEFAULT_SESSION_PREFIX,
        spin_lock_wait_micros: int = DEFAULT_SPIN_LOCK_WAIT_MICROS,
        lock_max_wait_micros: int = DEFAULT_LOCK_MAX_WAIT_MICROS,
        read_only: bool = False,
        strict_release: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the lock handle.

        Args:
            redis_client: Synchronous Redis client.
            prefix: Prefix for session keys.
            spin_lock_wait_micros: Pause between two attempts, in µs.
            lock_max_wait_micros: Total wait budget, in µs.
            read_only: Never take the lock.
            strict_release: Only delete the lock key if it still holds our token.
            sleep: Sleep function taking seconds (injectable for tests).

        Raises:
            SessionValidationError: If the wait values are not positive or
                the budget is smaller than one spin interval.
        """
        _validate_wait(spin_lock_wait_micros, lock_max_wait_micros)

        self._redis: Redis = redis_client
        self._prefix: str = prefix
        self._spin_lock_wait_micros: int = spin_lock_wait_micros
        self._lock_max_wait_micros: int = lock_max_wait_micros
        self._read_only: bool = read_only
        self._strict_release: bool = strict_release
        self._sleep = sleep

        self._lock_key: Optional[str] = None
        self._token: Optional[str] = None
        self._is_locked: bool = False
        self._release_script: Optional[Script] = None
        self._logger = get_logger(__name__)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def lock_key(self) -> Optional[str]:
        """Key of the held lock, None when no lock is held."""
        return self._lock_key

    @property
    def is_locked(self) -> bool:
        return self._is_locked

    @property
    def read_only(self) -> bool:
        return self._read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        if value and self._is_locked:
            raise SessionValidationError(
                f"Cannot switch to read-only while holding '{self._lock_key}'",
                field="read_only",
                value=value,
            )
        self._read_only = value

    @property
    def attempts(self) -> int:
        """Number of SET NX attempts one acquisition makes before giving up."""
        return self._lock_max_wait_micros // self._spin_lock_wait_micros

    @property
    def lock_ttl_seconds(self) -> int:
        """Expiry of the lock key: the wait budget in whole seconds, plus one."""
        return self._lock_max_wait_micros // MICROS_PER_SECOND + 1

    # =========================================================================
    # Acquire / Release
    # =========================================================================

    def acquire(self, session_id: str) -> bool:
        """
        Acquire the lock of a session, spinning until the wait budget is spent.

        Args:
            session_id: The session's unique identifier.

        Returns:
            True once the lock is held (immediately if already held or read-only).

        Raises:
            LockTtlMissingError: If the contended lock key has no expiry.
            LockTimeoutError: If every attempt found the lock held.
            StoreError: If Redis fails.
        """
        if self._is_locked or self._read_only:
            return True

        key = lock_key(self._prefix, session_id)
        token = uuid4().hex
        attempts = self.attempts
        started = time.monotonic()

        with create_span(
            "session_lock.acquire",
            {"lock.key": key, "lock.max_attempts": attempts},
        ) as span:
            for attempt in range(1, attempts + 1):
                if self._redis.set(key, token, nx=True, ex=self.lock_ttl_seconds):
                    self._lock_key = key
                    self._token = token
                    self._is_locked = True

                    span.set_attribute("lock.attempts", attempt)
                    record_lock_acquisition("acquired", time.monotonic() - started)
                    self._logger.debug(
                        "session lock acquired", lock_key=key, attempts=attempt
                    )
                    return True

                self._sleep(self._spin_lock_wait_micros / MICROS_PER_SECOND)

            span.set_attribute("lock.attempts", attempts)
            elapsed = time.monotonic() - started

            if self._redis.ttl(key) == -1:
                record_lock_acquisition("ttl_missing", elapsed)
                self._logger.error("session lock has no ttl", lock_key=key)
                raise LockTtlMissingError(key)

            record_lock_acquisition("timeout", elapsed)
            self._logger.warning(
                "session lock timeout",
                lock_key=key,
                attempts=attempts,
                spin_lock_wait_micros=self._spin_lock_wait_micros,
                elapsed_seconds=round(elapsed, 6),
            )
            raise LockTimeoutError(
                key,
                attempts=attempts,
                spin_lock_wait_micros=self._spin_lock_wait_micros,
                waited_micros=attempts * self._spin_lock_wait_micros,
            )

    def release(self) -> bool:
        """
        Release the held lock, if any.

        Local state is cleared before Redis is called, so a failed DEL still
        leaves the handle unlocked; the key then expires on its own.

        Returns:
            True if a lock was tracked, False if there was nothing to release.

        Raises:
            StoreError: If Redis fails.
        """
        if self._lock_key is None:
            return False

        key, token = self._lock_key, self._token
        self._lock_key = None
        self._token = None
        self._is_locked = False

        try:
            if self._strict_release:
                deleted = self._get_release_script()(keys=[key], args=[token])
            else:
                deleted = self._redis.delete(key)
        finally:
            record_lock_dropped()

        if deleted:
            record_lock_release("released")
            self._logger.debug("session lock released", lock_key=key)
        else:
            record_lock_release("not_owner")
            self._logger.warning(
                "session lock was no longer ours on release", lock_key=key
            )
        return True

    @contextmanager
    def hold(self, session_id: str) -> Iterator["SessionLock"]:
        """
        Hold the lock of a session for the duration of a ``with`` block.

        The lock is released on every exit path, including exceptions.
        """
        self.acquire(session_id)
        try:
            yield self
        finally:
            self.release()

    def _get_release_script(self) -> Script:
        if self._release_script is None:
            self._release_script = self._redis.register_script(RELEASE_SCRIPT)
        return self._release_script
