"""Unit tests for credential sync metrics."""

import pytest

from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.models import SyncOutcome, SyncReport, SyncStatus


@pytest.fixture
def metrics():
    return AuthSyncMetrics()


@pytest.mark.unit
class TestAuthSyncMetrics:
    def test_starts_empty(self, metrics):
        snapshot = metrics.snapshot()

        assert all(count == 0 for count in snapshot["passes"].values())
        assert snapshot["provider_errors"] == {}
        assert snapshot["last_report_kind"] is None

    def test_pass_counters(self, metrics):
        metrics.record_attempt()
        metrics.record_attempt()
        metrics.record_rejected()
        metrics.record_failed("RuntimeError")

        assert metrics.count("attempts") == 2
        assert metrics.count("rejected_in_progress") == 1
        assert metrics.count("failed") == 1

    def test_record_report(self, metrics):
        report = SyncReport(
            outcomes=[
                SyncOutcome("openai", SyncStatus.SYNCED, attempts=1),
                SyncOutcome(
                    "anthropic", SyncStatus.FAILED, error_category="client_error"
                ),
            ],
            duration_seconds=0.5,
        )

        metrics.record_report(report)

        assert metrics.count("completed") == 1
        assert metrics.outcome_count(SyncStatus.SYNCED) == 1
        assert metrics.outcome_count(SyncStatus.FAILED) == 1
        assert metrics.provider_error_count("anthropic", "client_error") == 1
        snapshot = metrics.snapshot()
        assert snapshot["provider_errors"] == {"anthropic": {"client_error": 1}}
        assert snapshot["last_duration_seconds"] == 0.5
        assert snapshot["last_report_kind"] == "partial_failure"

    def test_cancelled_and_timed_out_passes(self, metrics):
        metrics.record_report(SyncReport(was_cancelled=True))
        metrics.record_report(SyncReport(timed_out=True))

        assert metrics.count("cancelled") == 1
        assert metrics.count("timed_out") == 1
        assert metrics.count("completed") == 0

    def test_reset(self, metrics):
        metrics.record_attempt()
        metrics.record_report(SyncReport(duration_seconds=1.0))

        metrics.reset()

        assert metrics.count("attempts") == 0
        assert metrics.snapshot()["last_duration_seconds"] is None

    def test_instances_do_not_share_series(self, metrics):
        other = AuthSyncMetrics()

        metrics.record_attempt()

        assert metrics.count("attempts") == 1
        assert other.count("attempts") == 0
        assert metrics.registry is not other.registry

    def test_outcome_count_by_provider(self, metrics):
        metrics.record_provider_result("openai", SyncStatus.SYNCED)
        metrics.record_provider_result("anthropic", SyncStatus.SYNCED)

        assert metrics.outcome_count(SyncStatus.SYNCED) == 2
        assert metrics.outcome_count(SyncStatus.SYNCED, provider="openai") == 1

    def test_registry_sample_values(self, metrics):
        metrics.record_provider_result(
            "groq", SyncStatus.FAILED, error_category="network"
        )

        assert (
            metrics.registry.get_sample_value(
                "auth_sync_provider_outcomes_total",
                {"provider": "groq", "status": "failed"},
            )
            == 1.0
        )
        assert (
            metrics.registry.get_sample_value(
                "auth_sync_provider_errors_total",
                {"provider": "groq", "error_category": "network"},
            )
            == 1.0
        )

    def test_duration_histogram_observed(self, metrics):
        metrics.record_report(SyncReport(duration_seconds=0.2))
        metrics.record_report(SyncReport(duration_seconds=3.0))

        assert (
            metrics.registry.get_sample_value("auth_sync_pass_duration_seconds_count")
            == 2.0
        )
        assert metrics.snapshot()["last_duration_seconds"] == 3.0

    def test_render_exposition_format(self, metrics):
        metrics.record_attempt()

        text = metrics.render().decode()

        assert 'auth_sync_passes_total{event="attempts"} 1.0' in text
        assert "# TYPE auth_sync_pass_duration_seconds histogram" in text
