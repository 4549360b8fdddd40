from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.dependencies.rate_limits import setup_rate_limiter
from api.routes import system
from infrastructure.configuration import Settings
from infrastructure.services.providers import get_settings


def create_test_app():
    app = FastAPI()
    setup_rate_limiter(app)
    app.include_router(system.router)
    app.dependency_overrides[get_settings] = lambda: Settings(GIT_SHA="abc1234")
    return app


client = TestClient(create_test_app())


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": "abc1234"}


def test_get_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_is_rate_limited():
    for _ in range(50):
        client.get("/health")

    response = client.get("/health")

    assert response.status_code == 429
