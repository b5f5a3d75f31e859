"""
Custom exceptions for the Redis session handler.

This module provides the exception hierarchy raised by the session lock and
the session handler. All exceptions inherit from SessionHandlerException and
include error codes for consistent error handling and logging.

Store-level failures (connection refused, timeouts, ...) are NOT wrapped:
they surface as redis-py exceptions, exported here as ``StoreError``.
"""

from enum import Enum
from typing import Any

from redis.exceptions import RedisError

# Store failures propagate unchanged from redis-py.
StoreError = RedisError


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for session handler exceptions.

    These codes provide a consistent way to identify error types in logs.
    """

    SESSION_HANDLER_ERROR = "SESSION_HANDLER_ERROR"
    SESSION_LOCK_ERROR = "SESSION_LOCK_ERROR"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    LOCK_TTL_MISSING = "LOCK_TTL_MISSING"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Base Exception
# =============================================================================


class SessionHandlerException(Exception):
    """
    Base exception for all session handler errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.SESSION_HANDLER_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Lock Errors
# =============================================================================


class SessionLockError(SessionHandlerException):
    """
    Exception for session lock acquisition failures.

    Attributes:
        lock_key: Redis key of the lock that could not be acquired.
    """

    def __init__(
        self,
        message: str,
        lock_key: str,
        error_code: str = ErrorCode.SESSION_LOCK_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.lock_key = lock_key


class LockTimeoutError(SessionLockError):
    """
    Raised when every lock attempt found the lock already held.

    The wait budget is already spent when this is raised, so it is
    never retried internally.

    Attributes:
        attempts: Number of SET NX attempts made.
        spin_lock_wait_micros: Pause between attempts, in microseconds.
        waited_micros: Total time spent waiting, in microseconds.
    """

    def __init__(
        self,
        lock_key: str,
        attempts: int,
        spin_lock_wait_micros: int,
        waited_micros: int,
        **kwargs: Any,
    ) -> None:
        message = (
            f"Unable to lock session '{lock_key}' ({attempts} attempts, "
            f"spin lock wait {spin_lock_wait_micros} µs, total time {waited_micros} µs)"
        )
        super().__init__(message, lock_key, ErrorCode.LOCK_TIMEOUT, **kwargs)
        self.attempts = attempts
        self.spin_lock_wait_micros = spin_lock_wait_micros
        self.waited_micros = waited_micros


class LockTtlMissingError(SessionLockError):
    """
    Raised when the contended lock key exists without an expiry.

    This is not contention: some writer created the lock key without a TTL,
    so it will never expire on its own.
    """

    def __init__(self, lock_key: str, **kwargs: Any) -> None:
        message = f"Unable to lock session '{lock_key}' (lock ttl not set)"
        super().__init__(message, lock_key, ErrorCode.LOCK_TTL_MISSING, **kwargs)


# =============================================================================
# Validation Errors
# =============================================================================


class SessionValidationError(SessionHandlerException):
    """
    Exception for invalid arguments or configuration.

    Attributes:
        field: Name of the field that failed validation.
        value: The invalid value.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.field = field
        self.value = value
