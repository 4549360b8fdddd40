"""Error taxonomy for credential sync.

Every error carries a machine ``category`` (used for metrics and reports)
and an ``is_retryable`` flag derived from typed attributes only, never from
the message text.

Retryability:
- Timeouts and connection failures: retryable
- HTTP 429, 502, 503, 504: retryable
- Every other 4xx/5xx, 500 included: not retryable

Usage:
    from modules.auth_sync.errors import ProviderSyncError

    try:
        await client.put_credential(provider, secret)
    except RemoteSyncError as e:
        if e.is_retryable:
            ...
"""

from typing import Optional

from infrastructure.resilience.circuit_breaker import CircuitBreakerOpenError

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class AuthSyncError(Exception):
    """Base class for all credential sync errors."""

    category = "auth_sync"

    @property
    def is_retryable(self) -> bool:
        return False


class EnvLoadError(AuthSyncError):
    """Reading an on-disk environment override failed. Never fatal."""

    category = "env_load"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load environment file {path}: {reason}")


class KeyValidationError(AuthSyncError):
    """A candidate credential failed validation and was never transmitted.

    Wraps the validator's outcome; ``message`` never includes the key.
    """

    category = "validation"

    def __init__(self, provider: str, outcome):
        self.provider = provider
        self.outcome = outcome
        self.reason = outcome.reason
        self.message = outcome.message
        super().__init__(f"Invalid credential for {provider}: {outcome.message}")


class RemoteSyncError(AuthSyncError):
    """Failure reported by the remote sync client.

    Attributes:
        status_code: HTTP-style status, when the remote answered
        is_timeout: The request timed out
        is_connection: The connection could not be established or was lost
    """

    category = "remote"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_timeout: bool = False,
        is_connection: bool = False,
    ):
        self.status_code = status_code
        self.is_timeout = is_timeout
        self.is_connection = is_connection
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        if self.is_timeout or self.is_connection:
            return True
        return self.status_code in RETRYABLE_STATUS_CODES


class ProviderSyncError(RemoteSyncError):
    """The remote rejected or failed the request."""

    def __init__(
        self, provider: str, status_code: Optional[int] = None, body: str = ""
    ):
        self.provider = provider
        self.body = body
        message = f"Remote rejected credential for {provider}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if body:
            message += f": {body}"
        super().__init__(message, status_code=status_code)

    @property
    def category(self) -> str:  # type: ignore[override]
        if self.status_code is None:
            return "provider_sync"
        if 400 <= self.status_code < 500:
            return "client_error"
        if self.status_code >= 500:
            return "server_error"
        return "provider_sync"


class NetworkError(RemoteSyncError):
    """Timeout or connection-level failure talking to the remote."""

    def __init__(
        self, message: str, is_timeout: bool = False, is_connection: bool = False
    ):
        super().__init__(message, is_timeout=is_timeout, is_connection=is_connection)

    @property
    def category(self) -> str:  # type: ignore[override]
        if self.is_timeout:
            return "timeout"
        if self.is_connection:
            return "connection"
        return "network"


class SyncCancelledError(AuthSyncError):
    category = "cancelled"

    def __init__(self, message: str = "Sync was cancelled"):
        super().__init__(message)


class NoRemoteConfiguredError(AuthSyncError):
    """No remote service is configured to receive credentials."""

    category = "no_remote"

    def __init__(self, message: str = "No remote sync service is configured"):
        super().__init__(message)


class PathDetectionError(AuthSyncError):
    """The credential-store location could not be determined at all."""

    category = "path_detection"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not determine credential store location: {reason}")


class GlobalTimeoutError(AuthSyncError):
    category = "global_timeout"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Sync exceeded global timeout of {timeout_seconds}s")


class SyncInProgressError(AuthSyncError):
    """Another sync pass already holds the single-flight gate."""

    category = "in_progress"

    def __init__(self, message: str = "A credential sync is already in progress"):
        super().__init__(message)


def error_category(error: BaseException) -> str:
    """Return the category for any error raised during a sync attempt."""
    category = getattr(error, "category", None)
    if isinstance(category, str):
        return category
    return "unexpected"


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "AuthSyncError",
    "CircuitBreakerOpenError",
    "EnvLoadError",
    "GlobalTimeoutError",
    "KeyValidationError",
    "NetworkError",
    "NoRemoteConfiguredError",
    "PathDetectionError",
    "ProviderSyncError",
    "RemoteSyncError",
    "SyncCancelledError",
    "SyncInProgressError",
    "error_category",
]
