"""
Session key derivation.

    data key: <prefix>:<session_id>
    lock key: <prefix>:<session_id>.lock
"""

from redis_session.core.exceptions import SessionValidationError

LOCK_KEY_SUFFIX = ".lock"


def data_key(prefix: str, session_id: str) -> str:
    """
    Build the Redis key holding a session's payload.

    Args:
        prefix: Key prefix (e.g. "session")
        session_id: Caller-supplied session identifier

    Returns:
        "<prefix>:<session_id>"

    Raises:
        SessionValidationError: If session_id is empty.
    """
    if not session_id:
        raise SessionValidationError(
            "Session ID must be a non-empty string",
            field="session_id",
            value=session_id,
        )
    return f"{prefix}:{session_id}"


def lock_key(prefix: str, session_id: str) -> str:
    """Build the Redis key of a session's lock: data key + ".lock"."""
    return f"{data_key(prefix, session_id)}{LOCK_KEY_SUFFIX}"
