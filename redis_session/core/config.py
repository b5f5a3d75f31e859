"""
Core configuration module for the Redis session handler.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the REDIS_SESSION_ prefix.

Reference:
- Redis SET documentation: NX / EX options used by the session lock
- Pydantic Settings: BaseSettings pattern with env_prefix
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


# =============================================================================
# Lock Defaults
# =============================================================================

DEFAULT_SESSION_PREFIX: str = "session"
"""Prefix of every session data key (``<prefix>:<session_id>``)."""

DEFAULT_SPIN_LOCK_WAIT_MICROS: int = 150_000
"""Pause between two lock attempts, in microseconds."""

DEFAULT_LOCK_MAX_WAIT_MICROS: int = 30_000_000
"""Total lock wait budget, in microseconds."""


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the REDIS_SESSION_ prefix for environment variables.
    Example: REDIS_SESSION_LOCK_MAX_WAIT_MICROS=5000000
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="redis-session-handler",
        description="Name of the service for logging and tracing",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Default structured log level",
    )
    otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP collector endpoint; tracing is set up only when given",
    )

    # =========================================================================
    # Redis Configuration
    # =========================================================================
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL for session data and locks",
    )
    redis_pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Size of the Redis connection pool",
    )
    redis_socket_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=300.0,
        description="Socket timeout in seconds for Redis commands",
    )

    # =========================================================================
    # Session Configuration
    # =========================================================================
    session_prefix: str = Field(
        default=DEFAULT_SESSION_PREFIX,
        min_length=1,
        description="Prefix for session keys in Redis",
    )
    session_ttl_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Session data time-to-live in seconds (None = never expires)",
    )
    read_only: bool = Field(
        default=False,
        description="Never lock and never write sessions",
    )

    # =========================================================================
    # Lock Configuration
    # =========================================================================
    spin_lock_wait_micros: int = Field(
        default=DEFAULT_SPIN_LOCK_WAIT_MICROS,
        gt=0,
        description="Time to wait in microseconds between two lock attempts",
    )
    lock_max_wait_micros: int = Field(
        default=DEFAULT_LOCK_MAX_WAIT_MICROS,
        gt=0,
        description="Maximum time to wait in microseconds for a session lock",
    )
    strict_release: bool = Field(
        default=True,
        description="Only delete the lock key when it still holds our token",
    )

    model_config = {
        "env_prefix": "REDIS_SESSION_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss:// or unix://")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def validate_lock_wait(self) -> "Settings":
        """The wait budget must cover at least one attempt."""
        if self.lock_max_wait_micros < self.spin_lock_wait_micros:
            raise ValueError(
                "lock_max_wait_micros must be greater than or equal to spin_lock_wait_micros"
            )
        return self


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.
    This provides singleton behavior without global state.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
