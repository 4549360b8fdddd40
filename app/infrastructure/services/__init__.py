"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    SettingsDep,
    CircuitBreakerRegistryDep,
    AuthSyncMetricsDep,
    SyncOrchestratorDep,
)
from infrastructure.services.providers import (
    get_settings,
    get_circuit_breaker_registry,
    get_auth_sync_metrics,
    get_remote_sync_client,
    get_sync_orchestrator,
)

__all__ = [
    "SettingsDep",
    "CircuitBreakerRegistryDep",
    "AuthSyncMetricsDep",
    "SyncOrchestratorDep",
    "get_settings",
    "get_circuit_breaker_registry",
    "get_auth_sync_metrics",
    "get_remote_sync_client",
    "get_sync_orchestrator",
]
