import pytest

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import providers

CREDENTIAL_ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_GENERATIVE_AI_API_KEY",
    "MISTRAL_API_KEY",
    "COHERE_API_KEY",
    "OPENCODE_DATA_DIR",
    "XDG_DATA_HOME",
    "AUTH_SYNC_REMOTE_URL",
    "AUTH_SYNC_REMOTE_USERNAME",
    "AUTH_SYNC_REMOTE_PASSWORD",
    "AUTH_SYNC_SKIP_OAUTH_PROVIDERS",
    "AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS",
    "AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS",
    "AUTH_SYNC_LOCK_WAIT_SECONDS",
    "AUTH_SYNC_DOTENV_PATH",
    "AUTH_SYNC_PROVIDERS",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the developer's real credentials and .env files out of tests."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(autouse=True)
def clear_service_caches():
    """Reset lru_cache singletons and rate limit counters between tests."""
    cached = (
        providers.get_settings,
        providers.get_circuit_breaker_registry,
        providers.get_auth_sync_metrics,
        providers.get_remote_sync_client,
        providers.get_sync_orchestrator,
    )
    for provider in cached:
        provider.cache_clear()
    get_limiter().reset()
    yield
    for provider in cached:
        provider.cache_clear()
