"""
Unit tests for redis_session/core/config.py - Settings Class and Singleton.

Reference:
- Pydantic Settings: BaseSettings pattern with env_prefix="REDIS_SESSION_"
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettingsClassExists:
    """Tests for Settings class creation."""

    def test_settings_extends_base_settings(self):
        from pydantic_settings import BaseSettings

        from redis_session.core.config import Settings

        assert issubclass(Settings, BaseSettings)


class TestSettingsDefaults:
    """Defaults match the session handler constructor defaults."""

    def test_lock_defaults(self):
        from redis_session.core.config import Settings

        settings = Settings()

        assert settings.session_prefix == "session"
        assert settings.session_ttl_seconds is None
        assert settings.spin_lock_wait_micros == 150_000
        assert settings.lock_max_wait_micros == 30_000_000
        assert settings.read_only is False
        assert settings.strict_release is True

    def test_redis_defaults(self):
        from redis_session.core.config import Settings

        settings = Settings()

        assert settings.redis_url == "redis://localhost:6379"
        assert settings.redis_pool_size == 10
        assert settings.redis_socket_timeout_seconds == 5.0

    def test_service_defaults(self):
        from redis_session.core.config import Settings

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.otlp_endpoint is None


class TestSettingsEnvPrefix:
    """Tests for env_prefix configuration."""

    def test_settings_has_env_prefix(self):
        from redis_session.core.config import Settings

        assert Settings.model_config.get("env_prefix") == "REDIS_SESSION_"

    def test_settings_loads_from_prefixed_env_vars(self):
        with patch.dict(
            os.environ,
            {
                "REDIS_SESSION_SESSION_PREFIX": "app",
                "REDIS_SESSION_SESSION_TTL_SECONDS": "3600",
                "REDIS_SESSION_SPIN_LOCK_WAIT_MICROS": "1000",
                "REDIS_SESSION_LOCK_MAX_WAIT_MICROS": "5000",
                "REDIS_SESSION_READ_ONLY": "true",
                "REDIS_SESSION_LOG_LEVEL": "debug",
            },
        ):
            from redis_session.core.config import Settings

            settings = Settings()

        assert settings.session_prefix == "app"
        assert settings.session_ttl_seconds == 3600
        assert settings.spin_lock_wait_micros == 1000
        assert settings.lock_max_wait_micros == 5000
        assert settings.read_only is True
        assert settings.log_level == "DEBUG"


class TestSettingsValidation:
    """Tests for field and model validation."""

    @pytest.mark.parametrize(
        "field,value",
        [
            ("spin_lock_wait_micros", 0),
            ("lock_max_wait_micros", -1),
            ("session_ttl_seconds", 0),
            ("redis_pool_size", 0),
            ("session_prefix", ""),
            ("log_level", "VERBOSE"),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        from redis_session.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_max_wait_below_spin_wait_rejected(self):
        from redis_session.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(spin_lock_wait_micros=5000, lock_max_wait_micros=1000)

    def test_max_wait_equal_to_spin_wait_allowed(self):
        from redis_session.core.config import Settings

        settings = Settings(spin_lock_wait_micros=5000, lock_max_wait_micros=5000)

        assert settings.lock_max_wait_micros == 5000

    def test_redis_url_must_be_valid_url(self):
        from redis_session.core.config import Settings

        with pytest.raises(ValidationError):
            Settings(redis_url="not-a-url")

    @pytest.mark.parametrize(
        "url",
        ["redis://cache:6379/0", "rediss://cache:6380", "unix:///tmp/redis.sock"],
    )
    def test_redis_url_schemes_accepted(self, url):
        from redis_session.core.config import Settings

        assert Settings(redis_url=url).redis_url == url


class TestSettingsSingleton:
    """Tests for get_settings()."""

    def test_get_settings_returns_same_instance(self):
        from redis_session.core.config import Settings, get_settings

        settings1 = get_settings()
        settings2 = get_settings()

        assert isinstance(settings1, Settings)
        assert settings1 is settings2

    def test_exported_from_core(self):
        from redis_session.core import Settings, get_settings

        assert Settings is not None
        assert callable(get_settings)
