# modules/auth_sync/__init__.py
"""Credential synchronization module.

Pushes locally available provider API keys to a remote service:

- Keys are read from the environment (and an optional .env file), validated
  per provider and wrapped in Secret containers
- Providers that already have OAuth configured are skipped
- Each provider has its own circuit breaker; retryable failures are retried
  with exponential backoff
- Passes are single-flight, cancellable and bounded by a global timeout
"""

from modules.auth_sync.client import HttpRemoteSyncClient, RemoteSyncClient
from modules.auth_sync.loader import CredentialLoader
from modules.auth_sync.metrics import AuthSyncMetrics
from modules.auth_sync.models import (
    AuthKind,
    InvalidReason,
    LoadedCredentials,
    OAuthStatus,
    OAuthStatusKind,
    ReportKind,
    SyncOutcome,
    SyncReport,
    SyncStatus,
    ValidationOutcome,
)
from modules.auth_sync.oauth import OAuthStatusResolver, resolve_oauth_status
from modules.auth_sync.orchestrator import SyncOrchestrator
from modules.auth_sync.paths import StorePath, resolve_store_path
from modules.auth_sync.providers import (
    BUILTIN_PROVIDERS,
    ProviderDefinition,
    definitions_from_settings,
)
from modules.auth_sync.validation import validate

__all__ = [
    "AuthKind",
    "AuthSyncMetrics",
    "BUILTIN_PROVIDERS",
    "CredentialLoader",
    "HttpRemoteSyncClient",
    "InvalidReason",
    "LoadedCredentials",
    "OAuthStatus",
    "OAuthStatusKind",
    "OAuthStatusResolver",
    "ProviderDefinition",
    "RemoteSyncClient",
    "ReportKind",
    "StorePath",
    "SyncOrchestrator",
    "SyncOutcome",
    "SyncReport",
    "SyncStatus",
    "ValidationOutcome",
    "definitions_from_settings",
    "resolve_oauth_status",
    "resolve_store_path",
    "validate",
]
