"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated
from fastapi import Depends
from infrastructure.configuration import Settings
from infrastructure.resilience import CircuitBreakerRegistry
from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.orchestrator import SyncOrchestrator
from infrastructure.services.providers import (
    get_settings,
    get_circuit_breaker_registry,
    get_auth_sync_metrics,
    get_sync_orchestrator,
)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Process-lifetime circuit breakers, keyed by provider name
CircuitBreakerRegistryDep = Annotated[
    CircuitBreakerRegistry, Depends(get_circuit_breaker_registry)
]

# Credential sync telemetry
AuthSyncMetricsDep = Annotated[AuthSyncMetrics, Depends(get_auth_sync_metrics)]

# Credential sync orchestrator
SyncOrchestratorDep = Annotated[SyncOrchestrator, Depends(get_sync_orchestrator)]

__all__ = [
    "SettingsDep",
    "CircuitBreakerRegistryDep",
    "AuthSyncMetricsDep",
    "SyncOrchestratorDep",
]
