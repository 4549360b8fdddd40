"""Unit tests for infrastructure.logging.context module."""

import uuid

import pytest
import structlog

from infrastructure.logging.context import bind_sync_context


def bound():
    return structlog.contextvars.get_contextvars()


@pytest.fixture(autouse=True)
def clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.mark.unit
class TestBindSyncContext:
    def test_auto_generates_correlation_id(self):
        with bind_sync_context() as correlation_id:
            assert bound()["correlation_id"] == correlation_id
            uuid.UUID(correlation_id)

    def test_uses_provided_correlation_id(self):
        with bind_sync_context(correlation_id="pass-123") as correlation_id:
            assert correlation_id == "pass-123"
            assert bound()["correlation_id"] == "pass-123"

    def test_binds_trigger_and_extra(self):
        with bind_sync_context(trigger="api", providers=2):
            ctx = bound()
            assert ctx["trigger"] == "api"
            assert ctx["providers"] == 2

    def test_trigger_omitted_when_none(self):
        with bind_sync_context():
            assert "trigger" not in bound()

    def test_context_removed_on_exit(self):
        with bind_sync_context(trigger="api"):
            pass

        assert "correlation_id" not in bound()
        assert "trigger" not in bound()

    def test_context_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with bind_sync_context(trigger="api"):
                raise RuntimeError("boom")

        assert "correlation_id" not in bound()

    def test_unrelated_context_left_in_place(self):
        structlog.contextvars.bind_contextvars(request_path="/api/v1/auth-sync")

        with bind_sync_context(trigger="api"):
            pass

        assert bound() == {"request_path": "/api/v1/auth-sync"}
