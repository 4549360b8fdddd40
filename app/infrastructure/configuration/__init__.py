"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the credential
sync service using Pydantic BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    AuthSyncSettings: Credential sync feature settings class
    RetrySettings: Retry policy settings class
    CircuitBreakerSettings: Circuit breaker settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    remote = settings.auth_sync.remote_url
    max_attempts = settings.retry.max_attempts
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features.auth_sync import AuthSyncSettings
from infrastructure.configuration.infrastructure.circuit_breaker import (
    CircuitBreakerSettings,
)
from infrastructure.configuration.infrastructure.retry import RetrySettings

__all__ = [
    "Settings",
    "AuthSyncSettings",
    "CircuitBreakerSettings",
    "RetrySettings",
]
