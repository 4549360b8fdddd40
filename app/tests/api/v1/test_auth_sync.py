from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from infrastructure.resilience import CircuitBreakerRegistry, RetryConfig
from infrastructure.services.providers import (
    get_auth_sync_metrics,
    get_circuit_breaker_registry,
    get_sync_orchestrator,
)
from modules.auth_sync.errors import (
    NoRemoteConfiguredError,
    ProviderSyncError,
    SyncInProgressError,
)
from modules.auth_sync.loader import CredentialLoader
from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.models import OAuthStatus
from modules.auth_sync.orchestrator import SyncOrchestrator
from tests.factories.auth_sync import (
    builtin_definitions,
    make_api_key,
    make_remote_client,
)


class NotConfiguredResolver:
    def resolve_batch(self, providers):
        return {p: OAuthStatus.not_configured() for p in providers}


def create_test_app(orchestrator, breakers, metrics):
    app = FastAPI()
    setup_rate_limiter(app)
    app.include_router(api_router)
    app.dependency_overrides[get_sync_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_circuit_breaker_registry] = lambda: breakers
    app.dependency_overrides[get_auth_sync_metrics] = lambda: metrics
    return app


@pytest.fixture
def breakers():
    return CircuitBreakerRegistry(failure_threshold=1)


@pytest.fixture
def metrics():
    return AuthSyncMetrics()


@pytest.fixture
def remote():
    return make_remote_client()


@pytest.fixture
def orchestrator(tmp_path, remote, breakers, metrics):
    environ = {
        "OPENAI_API_KEY": make_api_key("openai"),
        "ANTHROPIC_API_KEY": make_api_key("anthropic"),
    }
    return SyncOrchestrator(
        remote,
        builtin_definitions("openai", "anthropic"),
        breakers=breakers,
        retry=RetryConfig(max_attempts=1, base_delay_seconds=0, max_delay_seconds=0),
        loader=CredentialLoader(environ=environ, cwd=tmp_path),
        oauth_resolver=NotConfiguredResolver(),
        metrics=metrics,
        global_timeout_seconds=5.0,
        attempt_timeout_seconds=1.0,
    )


@pytest.fixture
def client(orchestrator, breakers, metrics):
    with TestClient(create_test_app(orchestrator, breakers, metrics)) as test_client:
        yield test_client


def mock_orchestrator(sync_side_effect):
    orchestrator = MagicMock()
    orchestrator.sync = AsyncMock(side_effect=sync_side_effect, return_value=MagicMock())
    return orchestrator


def test_trigger_sync_returns_report(client, remote):
    response = client.post("/api/v1/auth-sync")

    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "success"
    assert body["summary"] == "2 synced"
    assert [o["provider"] for o in body["synced"]] == ["openai", "anthropic"]
    assert remote.put_credential.await_count == 2


def test_trigger_sync_with_provider_filter(client, remote):
    response = client.post("/api/v1/auth-sync", json={"providers": ["anthropic"]})

    assert response.status_code == 200
    assert [o["provider"] for o in response.json()["synced"]] == ["anthropic"]


def test_trigger_sync_never_returns_keys(client, remote):
    remote.put_credential.side_effect = [ProviderSyncError("openai", 401), None]

    response = client.post("/api/v1/auth-sync")

    assert response.status_code == 200
    assert response.json()["kind"] == "partial_failure"
    assert make_api_key("openai") not in response.text
    assert make_api_key("anthropic") not in response.text


def test_trigger_sync_in_progress_returns_409(breakers, metrics):
    app = create_test_app(mock_orchestrator(SyncInProgressError()), breakers, metrics)

    response = TestClient(app).post("/api/v1/auth-sync")

    assert response.status_code == 409
    assert response.json() == {"detail": "A credential sync is already in progress"}


def test_trigger_sync_without_remote_returns_503(breakers, metrics):
    app = create_test_app(mock_orchestrator(NoRemoteConfiguredError()), breakers, metrics)

    response = TestClient(app).post("/api/v1/auth-sync")

    assert response.status_code == 503


def test_trigger_sync_passes_options(breakers, metrics):
    orchestrator = mock_orchestrator(None)
    orchestrator.sync.return_value.to_dict.return_value = {"kind": "nothing_to_sync"}
    app = create_test_app(orchestrator, breakers, metrics)

    response = TestClient(app).post(
        "/api/v1/auth-sync",
        json={"skip_oauth_configured": False, "global_timeout_seconds": 12},
    )

    assert response.status_code == 200
    orchestrator.sync.assert_awaited_once_with(
        skip_oauth_configured=False,
        global_timeout=12.0,
        providers=None,
        trigger="api",
    )


@pytest.mark.parametrize("global_timeout", [0, -5, 86400])
def test_trigger_sync_rejects_out_of_range_timeout(breakers, metrics, global_timeout):
    orchestrator = mock_orchestrator(None)
    app = create_test_app(orchestrator, breakers, metrics)

    response = TestClient(app).post(
        "/api/v1/auth-sync", json={"global_timeout_seconds": global_timeout}
    )

    assert response.status_code == 422
    orchestrator.sync.assert_not_awaited()


def test_trigger_sync_rate_limited(breakers, metrics):
    orchestrator = mock_orchestrator(None)
    orchestrator.sync.return_value.to_dict.return_value = {}
    client = TestClient(create_test_app(orchestrator, breakers, metrics))

    for _ in range(10):
        assert client.post("/api/v1/auth-sync").status_code == 200
    response = client.post("/api/v1/auth-sync")

    assert response.status_code == 429
    assert response.json() == {"message": "Rate limit exceeded"}


def test_cancel_without_running_pass(client):
    response = client.post("/api/v1/auth-sync/cancel")

    assert response.status_code == 200
    assert response.json() == {"cancelled": False}


def test_status_reports_metrics_and_circuits(client, breakers):
    client.post("/api/v1/auth-sync")

    response = client.get("/api/v1/auth-sync/status")

    assert response.status_code == 200
    body = response.json()
    assert body["in_progress"] is False
    assert body["remote_configured"] is True
    assert body["metrics"]["passes"]["attempts"] == 1
    assert body["metrics"]["outcomes"]["synced"] == 2
    assert set(body["circuits"]) == {"openai", "anthropic"}
    assert body["circuits"]["openai"]["state"] == "closed"


def test_metrics_exposition(client):
    client.post("/api/v1/auth-sync")

    response = client.get("/api/v1/auth-sync/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert (
        'auth_sync_provider_outcomes_total{provider="openai",status="synced"} 1.0'
        in response.text
    )
    assert 'auth_sync_passes_total{event="completed"} 1.0' in response.text


def test_reset_single_circuit(client, breakers):
    breakers.get("openai").record_failure()

    response = client.post("/api/v1/auth-sync/circuits/reset", json={"provider": "openai"})

    assert response.status_code == 200
    assert response.json() == {"reset": ["openai"]}
    assert breakers.get_open() == []


def test_reset_all_circuits(client, breakers):
    breakers.get("openai").record_failure()
    breakers.get("anthropic").record_failure()

    response = client.post("/api/v1/auth-sync/circuits/reset")

    assert response.status_code == 200
    assert response.json() == {"reset": ["anthropic", "openai"]}
    assert breakers.get_open() == []


def test_reset_unknown_circuit_returns_404(client):
    response = client.post("/api/v1/auth-sync/circuits/reset", json={"provider": "groq"})
    assert response.status_code == 404
