"""Sync orchestrator.

Coordinates one credential sync pass:

1. Acquire the single-flight gate (fail fast with SyncInProgressError)
2. Load and validate credentials; invalid ones are reported, never sent
3. For each valid provider, in definition order:
   - skip it when OAuth is configured and skipping was requested
   - ask its circuit breaker for admission
   - push the key with bounded retry and exponential backoff
4. Stop early on cancellation or when the global timeout expires
5. Wipe every loaded secret, release the gate, return a SyncReport

Only retryable failures are reported to the circuit breaker. Providers are
processed sequentially so remote load stays bounded.
"""

import asyncio
import time
from typing import Callable, Dict, List, Optional, Sequence

from infrastructure.logging import bind_sync_context, get_module_logger
from infrastructure.resilience import (
    CircuitBreakerOpenError,
    CircuitBreakerRegistry,
    RetryConfig,
)
from infrastructure.security import Secret
from modules.auth_sync.client import RemoteSyncClient
from modules.auth_sync.errors import (
    GlobalTimeoutError,
    NetworkError,
    NoRemoteConfiguredError,
    RemoteSyncError,
    SyncCancelledError,
    SyncInProgressError,
    error_category,
)
from modules.auth_sync.loader import CredentialLoader
from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.models import (
    AuthKind,
    LoadedCredentials,
    OAuthStatus,
    OAuthStatusKind,
    SyncOutcome,
    SyncReport,
    SyncStatus,
)
from modules.auth_sync.oauth import OAuthStatusResolver
from modules.auth_sync.providers import ProviderDefinition, definitions_from_settings

logger = get_module_logger()


class SyncOrchestrator:
    """Runs credential sync passes against a remote sync client.

    The orchestrator is process-scoped: the circuit breaker registry and
    metrics it holds outlive individual passes. A pass only borrows them.

    Args:
        client: Remote sync client, None when no remote is configured
        definitions: Providers to consider, in processing order
        breakers: Per-provider circuit breaker registry
        retry: Retry policy for each provider
        loader: Credential loader
        oauth_resolver: Local credential-store resolver
        metrics: Telemetry sink
        global_timeout_seconds: Bound for a whole pass
        attempt_timeout_seconds: Bound for one remote call, shorter than the global one
        lock_wait_seconds: Wait on the single-flight gate before rejecting
        skip_oauth_configured: Default for ``sync(skip_oauth_configured=None)``
        clock: Monotonic time source
    """

    def __init__(
        self,
        client: Optional[RemoteSyncClient],
        definitions: Sequence[ProviderDefinition],
        breakers: Optional[CircuitBreakerRegistry] = None,
        retry: Optional[RetryConfig] = None,
        loader: Optional[CredentialLoader] = None,
        oauth_resolver: Optional[OAuthStatusResolver] = None,
        metrics: Optional[AuthSyncMetrics] = None,
        global_timeout_seconds: float = 30.0,
        attempt_timeout_seconds: float = 10.0,
        lock_wait_seconds: float = 0.1,
        skip_oauth_configured: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not 0 < attempt_timeout_seconds < global_timeout_seconds:
            raise ValueError(
                "attempt_timeout_seconds must be positive and shorter than "
                "global_timeout_seconds"
            )
        self.client = client
        self.definitions = list(definitions)
        self.breakers = breakers or CircuitBreakerRegistry()
        self.retry = retry or RetryConfig()
        self.loader = loader or CredentialLoader()
        self.oauth_resolver = oauth_resolver or OAuthStatusResolver()
        self.metrics = metrics or AuthSyncMetrics()
        self.global_timeout_seconds = global_timeout_seconds
        self.attempt_timeout_seconds = attempt_timeout_seconds
        self.lock_wait_seconds = lock_wait_seconds
        self.skip_oauth_configured = skip_oauth_configured
        self._clock = clock

        self._lock = asyncio.Lock()
        self._cancel_event: Optional[asyncio.Event] = None

    @classmethod
    def from_settings(
        cls,
        settings,
        client: Optional[RemoteSyncClient],
        breakers: CircuitBreakerRegistry,
        metrics: AuthSyncMetrics,
    ) -> "SyncOrchestrator":
        """Build an orchestrator from the application ``Settings``."""
        auth_sync = settings.auth_sync
        return cls(
            client=client,
            definitions=definitions_from_settings(auth_sync),
            breakers=breakers,
            retry=RetryConfig.from_settings(settings.retry),
            loader=CredentialLoader(dotenv_path=auth_sync.dotenv_path),
            oauth_resolver=OAuthStatusResolver(),
            metrics=metrics,
            global_timeout_seconds=auth_sync.global_timeout_seconds,
            attempt_timeout_seconds=auth_sync.attempt_timeout_seconds,
            lock_wait_seconds=auth_sync.lock_wait_seconds,
            skip_oauth_configured=auth_sync.skip_oauth_providers,
        )

    @property
    def is_in_progress(self) -> bool:
        return self._lock.locked()

    def cancel(self) -> bool:
        """Request cancellation of the running pass.

        Returns:
            True if a pass was running and has been signalled.
        """
        if self._cancel_event is None:
            return False
        logger.info("auth_sync_cancel_requested")
        self._cancel_event.set()
        return True

    async def sync(
        self,
        skip_oauth_configured: Optional[bool] = None,
        global_timeout: Optional[float] = None,
        providers: Optional[Sequence[str]] = None,
        trigger: str = "manual",
    ) -> SyncReport:
        """Run one sync pass.

        Args:
            skip_oauth_configured: Skip providers with OAuth configured;
                defaults to the orchestrator setting
            global_timeout: Bound for this pass; defaults to the orchestrator setting
            providers: Restrict the pass to these provider names
            trigger: What started the pass, bound to every log line

        Returns:
            SyncReport partitioned by outcome

        Raises:
            NoRemoteConfiguredError: If there is no remote to sync to
            SyncInProgressError: If another pass holds the gate
            ValueError: If global_timeout is not positive
        """
        if self.client is None:
            raise NoRemoteConfiguredError()

        skip = self.skip_oauth_configured if skip_oauth_configured is None else skip_oauth_configured
        timeout = self.global_timeout_seconds if global_timeout is None else global_timeout
        if timeout <= 0:
            raise ValueError("global_timeout must be positive")

        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=self.lock_wait_seconds)
        except asyncio.TimeoutError:
            self.metrics.record_rejected()
            logger.warning("auth_sync_rejected_in_progress")
            raise SyncInProgressError() from None

        cancel_event = asyncio.Event()
        self._cancel_event = cancel_event
        try:
            with bind_sync_context(trigger=trigger) as correlation_id:
                self.metrics.record_attempt()
                try:
                    report = await self._run(skip, timeout, providers, cancel_event)
                except Exception as e:
                    self.metrics.record_failed(type(e).__name__)
                    logger.exception("auth_sync_pass_aborted", error=str(e))
                    raise
                report.correlation_id = correlation_id
                self.metrics.record_report(report)
                logger.info(
                    "auth_sync_completed",
                    kind=report.kind.value,
                    summary=report.summary(),
                    synced=len(report.synced),
                    failed=len(report.failed),
                    skipped=len(report.skipped),
                    invalid=len(report.validation_failed),
                    duration_seconds=round(report.duration_seconds, 3),
                )
                return report
        finally:
            self._cancel_event = None
            self._lock.release()

    def _select(self, providers: Optional[Sequence[str]]) -> List[ProviderDefinition]:
        if providers is None:
            return list(self.definitions)
        wanted = set(providers)
        known = {d.name for d in self.definitions}
        for name in sorted(wanted - known):
            logger.warning("auth_sync_unknown_provider", provider=name)
        return [d for d in self.definitions if d.name in wanted]

    async def _run(
        self,
        skip: bool,
        timeout: float,
        providers: Optional[Sequence[str]],
        cancel_event: asyncio.Event,
    ) -> SyncReport:
        start = self._clock()
        deadline = start + timeout
        report = SyncReport()
        loaded: Optional[LoadedCredentials] = None

        try:
            definitions = self._select(providers)
            loaded = await asyncio.to_thread(self.loader.load, definitions)

            for definition in definitions:
                error = loaded.invalid.get(definition.name)
                if error is not None:
                    report.outcomes.append(
                        SyncOutcome(
                            provider=definition.name,
                            status=SyncStatus.VALIDATION_FAILED,
                            error_category=error.category,
                            message=error.message,
                        )
                    )

            pending = [d.name for d in definitions if d.name in loaded.valid]
            statuses: Dict[str, OAuthStatus] = {}
            if pending:
                statuses = await asyncio.to_thread(
                    self.oauth_resolver.resolve_batch, pending
                )

            for name in pending:
                if cancel_event.is_set():
                    report.was_cancelled = True
                    logger.info("auth_sync_cancelled", next_provider=name)
                    break
                if self._clock() >= deadline:
                    report.timed_out = True
                    logger.warning("auth_sync_global_timeout", next_provider=name)
                    break

                outcome = await self._sync_provider(
                    name,
                    loaded.valid[name],
                    statuses.get(name, OAuthStatus.not_configured()),
                    skip,
                    deadline,
                    timeout,
                    cancel_event,
                )
                report.outcomes.append(outcome)

                if outcome.status == SyncStatus.CANCELLED:
                    report.was_cancelled = True
                    break
                if outcome.error_category == GlobalTimeoutError.category:
                    report.timed_out = True
                    break
        finally:
            if loaded is not None:
                loaded.wipe()
            report.duration_seconds = self._clock() - start

        return report

    async def _remote_reports_oauth(self, name: str, deadline: float) -> bool:
        """Single best-effort remote check used when the local status is unknown."""
        timeout = min(self.attempt_timeout_seconds, max(deadline - self._clock(), 0))
        if timeout <= 0:
            return False
        try:
            kind = await asyncio.wait_for(
                self.client.get_credential_status(name, timeout=timeout), timeout=timeout
            )
        except (RemoteSyncError, asyncio.TimeoutError) as e:
            logger.debug(
                "remote_status_check_failed", provider=name, error_category=error_category(e)
            )
            return False
        return kind == AuthKind.OAUTH

    async def _sync_provider(
        self,
        name: str,
        secret: Secret,
        oauth_status: OAuthStatus,
        skip: bool,
        deadline: float,
        global_timeout: float,
        cancel_event: asyncio.Event,
    ) -> SyncOutcome:
        if skip and oauth_status.kind == OAuthStatusKind.UNKNOWN:
            logger.warning(
                "oauth_status_unknown", provider=name, reason=oauth_status.reason
            )
            if await self._remote_reports_oauth(name, deadline):
                oauth_status = OAuthStatus.configured()

        if skip and oauth_status.is_configured:
            logger.info("provider_skipped_oauth", provider=name)
            return SyncOutcome(
                provider=name,
                status=SyncStatus.SKIPPED,
                message="OAuth configured",
                oauth_status=oauth_status,
            )

        breaker = self.breakers.get(name)
        attempts = 0

        def timed_out() -> SyncOutcome:
            logger.warning("provider_sync_global_timeout", provider=name, attempts=attempts)
            return SyncOutcome(
                provider=name,
                status=SyncStatus.FAILED,
                error_category=GlobalTimeoutError.category,
                attempts=attempts,
                message=str(GlobalTimeoutError(global_timeout)),
                oauth_status=oauth_status,
            )

        def cancelled() -> SyncOutcome:
            logger.info("provider_sync_cancelled", provider=name, attempts=attempts)
            return SyncOutcome(
                provider=name,
                status=SyncStatus.CANCELLED,
                error_category=SyncCancelledError.category,
                attempts=attempts,
                message=str(SyncCancelledError()),
                oauth_status=oauth_status,
            )

        for attempt in range(1, self.retry.max_attempts + 1):
            try:
                breaker.check_admission()
            except CircuitBreakerOpenError as e:
                return SyncOutcome(
                    provider=name,
                    status=SyncStatus.FAILED,
                    error_category=e.category,
                    attempts=attempts,
                    message=str(e),
                    retry_after_seconds=e.retry_after,
                    oauth_status=oauth_status,
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                return timed_out()
            attempt_timeout = min(self.attempt_timeout_seconds, remaining)

            attempts += 1
            try:
                await asyncio.wait_for(
                    self.client.put_credential(name, secret, timeout=attempt_timeout),
                    timeout=attempt_timeout,
                )
            except asyncio.TimeoutError:
                if attempt_timeout < self.attempt_timeout_seconds:
                    return timed_out()
                error: RemoteSyncError = NetworkError(
                    f"Request to remote timed out for {name}", is_timeout=True
                )
            except RemoteSyncError as e:
                error = e
            else:
                breaker.record_success()
                logger.info("provider_synced", provider=name, attempts=attempts)
                return SyncOutcome(
                    provider=name,
                    status=SyncStatus.SYNCED,
                    attempts=attempts,
                    oauth_status=oauth_status,
                )

            retryable = error.is_retryable
            if retryable:
                breaker.record_failure(error)

            if not retryable or attempt == self.retry.max_attempts:
                logger.warning(
                    "provider_sync_failed",
                    provider=name,
                    attempts=attempts,
                    error_category=error.category,
                    status_code=error.status_code,
                    retryable=retryable,
                )
                return SyncOutcome(
                    provider=name,
                    status=SyncStatus.FAILED,
                    error_category=error.category,
                    status_code=error.status_code,
                    retryable=retryable,
                    attempts=attempts,
                    message=str(error),
                    oauth_status=oauth_status,
                )

            delay = self.retry.delay_for_attempt(attempt)
            logger.info(
                "provider_sync_retrying",
                provider=name,
                attempt=attempt,
                delay_seconds=delay,
                error_category=error.category,
                status_code=error.status_code,
            )
            remaining = deadline - self._clock()
            if delay >= remaining:
                if await self._wait_for_cancel(cancel_event, max(remaining, 0)):
                    return cancelled()
                return timed_out()
            if await self._wait_for_cancel(cancel_event, delay):
                return cancelled()

        # max_attempts >= 1 guarantees a return inside the loop
        raise AssertionError("retry loop exited without an outcome")

    @staticmethod
    async def _wait_for_cancel(cancel_event: asyncio.Event, delay: float) -> bool:
        """Sleep for ``delay`` seconds. Returns True if cancelled meanwhile."""
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
