"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache
from typing import Optional

from infrastructure.configuration import Settings
from infrastructure.resilience import CircuitBreakerRegistry
from modules.auth_sync.client import HttpRemoteSyncClient
from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.orchestrator import SyncOrchestrator


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            return settings.model_dump()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_circuit_breaker_registry() -> CircuitBreakerRegistry:
    """
    Get the process-lifetime circuit breaker registry.

    Circuit state outlives individual sync passes; every pass borrows
    breakers from this registry.
    """
    return CircuitBreakerRegistry.from_settings(get_settings().circuit_breaker)


@lru_cache
def get_auth_sync_metrics() -> AuthSyncMetrics:
    """Get application-scoped credential sync metrics."""
    return AuthSyncMetrics()


@lru_cache
def get_remote_sync_client() -> Optional[HttpRemoteSyncClient]:
    """
    Get the HTTP remote sync client, or None when no remote is configured.

    Returns:
        HttpRemoteSyncClient configured from AUTH_SYNC_REMOTE_* settings.
    """
    auth_sync = get_settings().auth_sync
    if not auth_sync.remote_url:
        return None
    return HttpRemoteSyncClient(
        base_url=auth_sync.remote_url,
        username=auth_sync.remote_username,
        password=auth_sync.remote_password,
        timeout=auth_sync.attempt_timeout_seconds,
    )


@lru_cache
def get_sync_orchestrator() -> SyncOrchestrator:
    """
    Get the application-scoped sync orchestrator.

    Usage:
        @router.post("/auth-sync")
        async def trigger(orchestrator: SyncOrchestratorDep):
            report = await orchestrator.sync()
    """
    return SyncOrchestrator.from_settings(
        get_settings(),
        client=get_remote_sync_client(),
        breakers=get_circuit_breaker_registry(),
        metrics=get_auth_sync_metrics(),
    )
