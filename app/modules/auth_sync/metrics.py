"""Prometheus telemetry for credential sync.

Each ``AuthSyncMetrics`` owns a ``CollectorRegistry`` so application and
test instances never share series. ``snapshot()`` reads the registry back
into plain data for the status endpoint, ``render()`` produces the text
exposition format.
"""

import threading
from typing import Any, Dict, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from infrastructure.logging import get_module_logger
from modules.auth_sync.models import SyncReport, SyncStatus

logger = get_module_logger()

PASS_EVENTS = (
    "attempts",
    "completed",
    "cancelled",
    "timed_out",
    "rejected_in_progress",
    "failed",
)

PASSES_METRIC = "auth_sync_passes"
OUTCOMES_METRIC = "auth_sync_provider_outcomes"
ERRORS_METRIC = "auth_sync_provider_errors"
DURATION_METRIC = "auth_sync_pass_duration_seconds"
LAST_DURATION_METRIC = "auth_sync_last_pass_duration_seconds"

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


class AuthSyncMetrics:
    """Counters, a duration histogram and a last-duration gauge for sync passes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._build()

    def _build(self) -> None:
        self.registry = CollectorRegistry()
        self._passes = Counter(
            PASSES_METRIC,
            "Credential sync passes by lifecycle event",
            ["event"],
            registry=self.registry,
        )
        self._outcomes = Counter(
            OUTCOMES_METRIC,
            "Per-provider sync outcomes",
            ["provider", "status"],
            registry=self.registry,
        )
        self._errors = Counter(
            ERRORS_METRIC,
            "Per-provider sync errors by category",
            ["provider", "error_category"],
            registry=self.registry,
        )
        self._duration = Histogram(
            DURATION_METRIC,
            "Duration of finished sync passes",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self.registry,
        )
        self._last_duration = Gauge(
            LAST_DURATION_METRIC,
            "Duration of the most recent finished sync pass",
            registry=self.registry,
        )
        self._has_finished_pass = False
        self._last_report_kind: Optional[str] = None

    def record_attempt(self) -> None:
        self._passes.labels(event="attempts").inc()

    def record_rejected(self) -> None:
        """A pass was refused because another one was running."""
        self._passes.labels(event="rejected_in_progress").inc()

    def record_failed(self, exception_type: str) -> None:
        """A pass aborted with an unexpected error."""
        self._passes.labels(event="failed").inc()
        logger.warning("auth_sync_pass_failed", exception_type=exception_type)

    def record_provider_result(
        self, provider: str, status: SyncStatus, error_category: Optional[str] = None
    ) -> None:
        self._outcomes.labels(provider=provider, status=status.value).inc()
        if error_category is not None:
            self._errors.labels(provider=provider, error_category=error_category).inc()

    def record_report(self, report: SyncReport) -> None:
        """Record a finished pass and every outcome in it."""
        for outcome in report.outcomes:
            self.record_provider_result(
                outcome.provider, outcome.status, outcome.error_category
            )
        if report.timed_out:
            event = "timed_out"
        elif report.was_cancelled:
            event = "cancelled"
        else:
            event = "completed"
        self._passes.labels(event=event).inc()
        self._duration.observe(report.duration_seconds)
        self._last_duration.set(report.duration_seconds)
        with self._lock:
            self._has_finished_pass = True
            self._last_report_kind = report.kind.value

    def _sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        return self.registry.get_sample_value(name, labels or {}) or 0.0

    def _labelled_totals(self, metric_name: str):
        for metric in self.registry.collect():
            if metric.name != metric_name:
                continue
            for sample in metric.samples:
                if sample.name == f"{metric_name}_total":
                    yield sample.labels, int(sample.value)

    def count(self, name: str) -> int:
        """Pass-level counter by event name (attempts, completed, cancelled, ...)."""
        return int(self._sample(f"{PASSES_METRIC}_total", {"event": name}))

    def outcome_count(self, status: SyncStatus, provider: Optional[str] = None) -> int:
        return sum(
            value
            for labels, value in self._labelled_totals(OUTCOMES_METRIC)
            if labels["status"] == status.value
            and (provider is None or labels["provider"] == provider)
        )

    def provider_error_count(self, provider: str, error_category: str) -> int:
        return int(
            self._sample(
                f"{ERRORS_METRIC}_total",
                {"provider": provider, "error_category": error_category},
            )
        )

    def snapshot(self) -> Dict[str, Any]:
        outcomes = {status.value: 0 for status in SyncStatus}
        for labels, value in self._labelled_totals(OUTCOMES_METRIC):
            outcomes[labels["status"]] += value

        provider_errors: Dict[str, Dict[str, int]] = {}
        for labels, value in sorted(
            self._labelled_totals(ERRORS_METRIC),
            key=lambda item: (item[0]["provider"], item[0]["error_category"]),
        ):
            provider_errors.setdefault(labels["provider"], {})[
                labels["error_category"]
            ] = value

        with self._lock:
            has_finished_pass = self._has_finished_pass
            last_report_kind = self._last_report_kind

        return {
            "passes": {event: self.count(event) for event in PASS_EVENTS},
            "outcomes": outcomes,
            "provider_errors": provider_errors,
            "last_duration_seconds": (
                self._sample(LAST_DURATION_METRIC) if has_finished_pass else None
            ),
            "last_report_kind": last_report_kind,
        }

    def render(self) -> bytes:
        """Prometheus text exposition of this instance's registry."""
        return generate_latest(self.registry)

    def reset(self) -> None:
        with self._lock:
            self._build()
