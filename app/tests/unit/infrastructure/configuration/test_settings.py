"""Unit tests for infrastructure.configuration.settings module.

Tests cover:
- AuthSyncSettings defaults, provider parsing and timeout validation
- RetrySettings and CircuitBreakerSettings defaults and overrides
- Settings aggregation and get_settings singleton
"""

import json

import pytest
from pydantic import ValidationError

from infrastructure.configuration import (
    AuthSyncSettings,
    CircuitBreakerSettings,
    RetrySettings,
    Settings,
)
from infrastructure.services.providers import get_settings


class TestAuthSyncSettings:
    """Test suite for AuthSyncSettings configuration."""

    def test_defaults(self):
        auth_sync = AuthSyncSettings()

        assert auth_sync.remote_url == ""
        assert auth_sync.skip_oauth_providers is True
        assert auth_sync.global_timeout_seconds == 30.0
        assert auth_sync.attempt_timeout_seconds == 10.0
        assert auth_sync.lock_wait_seconds == 0.1
        assert auth_sync.dotenv_path is None
        assert auth_sync.providers == []

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("AUTH_SYNC_REMOTE_URL", "http://localhost:4096")
        monkeypatch.setenv("AUTH_SYNC_SKIP_OAUTH_PROVIDERS", "false")
        monkeypatch.setenv("AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS", "60")
        monkeypatch.setenv("AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS", "5")

        auth_sync = AuthSyncSettings()

        assert auth_sync.remote_url == "http://localhost:4096"
        assert auth_sync.skip_oauth_providers is False
        assert auth_sync.global_timeout_seconds == 60.0
        assert auth_sync.attempt_timeout_seconds == 5.0

    def test_providers_from_json_env(self, monkeypatch):
        providers = [
            {"name": "openai", "api_key_env": "OPENAI_API_KEY"},
            {"name": "groq", "api_key_env": "GROQ_API_KEY", "min_length": 20},
        ]
        monkeypatch.setenv("AUTH_SYNC_PROVIDERS", json.dumps(providers))

        auth_sync = AuthSyncSettings()

        assert [p["name"] for p in auth_sync.providers] == ["openai", "groq"]
        assert auth_sync.providers[1]["min_length"] == 20

    def test_providers_from_list(self):
        auth_sync = AuthSyncSettings(
            AUTH_SYNC_PROVIDERS=[{"name": "openai", "api_key_env": "OPENAI_API_KEY"}]
        )
        assert auth_sync.providers[0]["name"] == "openai"

    def test_duplicate_provider_rejected(self):
        with pytest.raises(ValidationError):
            AuthSyncSettings(
                AUTH_SYNC_PROVIDERS=[
                    {"name": "openai", "api_key_env": "A"},
                    {"name": "openai", "api_key_env": "B"},
                ]
            )

    def test_provider_without_name_rejected(self):
        with pytest.raises(ValidationError):
            AuthSyncSettings(AUTH_SYNC_PROVIDERS=[{"api_key_env": "A"}])

    def test_attempt_timeout_must_be_shorter_than_global(self):
        with pytest.raises(ValidationError):
            AuthSyncSettings(
                AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS=10,
                AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS=10,
            )

    def test_attempt_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            AuthSyncSettings(AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS=0)


class TestRetrySettings:
    def test_defaults(self):
        retry = RetrySettings()

        assert retry.max_attempts == 3
        assert retry.base_delay_seconds == 0.2
        assert retry.max_delay_seconds == 2.0
        assert retry.backoff_multiplier == 2.0
        assert retry.jitter is False

    def test_partial_override(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "5")

        retry = RetrySettings()

        assert retry.max_attempts == 5
        assert retry.base_delay_seconds == 0.2


class TestCircuitBreakerSettings:
    def test_defaults(self):
        circuit_breaker = CircuitBreakerSettings()

        assert circuit_breaker.failure_threshold == 5
        assert circuit_breaker.success_threshold == 2
        assert circuit_breaker.reset_timeout_seconds == 60.0
        assert circuit_breaker.failure_window_seconds == 60.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CIRCUIT_BREAKER_FAILURE_THRESHOLD", "2")
        monkeypatch.setenv("CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS", "5")

        circuit_breaker = CircuitBreakerSettings()

        assert circuit_breaker.failure_threshold == 2
        assert circuit_breaker.reset_timeout_seconds == 5.0


class TestSettings:
    def test_sub_settings_instantiated(self):
        settings = Settings()

        assert isinstance(settings.auth_sync, AuthSyncSettings)
        assert isinstance(settings.retry, RetrySettings)
        assert isinstance(settings.circuit_breaker, CircuitBreakerSettings)

    def test_override_sub_settings(self):
        retry = RetrySettings(RETRY_MAX_ATTEMPTS=7)

        settings = Settings(retry=retry)

        assert settings.retry.max_attempts == 7

    def test_is_production_follows_prefix(self, monkeypatch):
        monkeypatch.delenv("PREFIX", raising=False)
        assert Settings().is_production is True

        monkeypatch.setenv("PREFIX", "dev-")
        assert Settings().is_production is False

    def test_dotenv_file_is_read(self, tmp_path):
        (tmp_path / ".env").write_text("AUTH_SYNC_REMOTE_URL=http://from-dotenv:4096\n")

        settings = Settings()

        assert settings.auth_sync.remote_url == "http://from-dotenv:4096"

    def test_get_settings_is_singleton(self):
        assert get_settings() is get_settings()
