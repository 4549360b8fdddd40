"""Data models for the credential sync module.

Lightweight dataclasses shared by the validator, the OAuth resolver, the
loader and the orchestrator. None of these ever hold a raw credential
except ``LoadedCredentials.valid``, whose values are ``Secret`` instances.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from infrastructure.security import Secret
from modules.auth_sync.errors import KeyValidationError


class InvalidReason(str, Enum):
    """Why a candidate credential was rejected."""

    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_PREFIX = "invalid_prefix"
    PLACEHOLDER_DETECTED = "placeholder_detected"
    INVALID_CHARACTERS = "invalid_characters"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking one candidate credential.

    ``reason`` is None for a valid key. ``message`` is safe to log: it only
    ever includes lengths, the expected prefix, the observed prefix of the
    same length, or the matched placeholder pattern.
    """

    reason: Optional[InvalidReason] = None
    message: str = ""
    expected_prefix: Optional[str] = None
    actual_prefix: Optional[str] = None
    pattern: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls()

    @classmethod
    def invalid(cls, reason: InvalidReason, message: str, **details: Any) -> "ValidationOutcome":
        return cls(reason=reason, message=message, **details)


class AuthKind(str, Enum):
    """Auth-kind tags used by the credential store and the remote service."""

    OAUTH = "oauth"
    API = "api"
    WELLKNOWN = "wellknown"


class OAuthStatusKind(str, Enum):
    CONFIGURED = "configured"
    API_KEY_CONFIGURED = "api_key_configured"
    WELLKNOWN_CONFIGURED = "wellknown_configured"
    NOT_CONFIGURED = "not_configured"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class OAuthStatus:
    """Remote auth mode known for a provider.

    Only ``CONFIGURED`` (an OAuth entry) licenses skipping a provider.
    """

    kind: OAuthStatusKind
    reason: Optional[str] = None

    @classmethod
    def configured(cls) -> "OAuthStatus":
        return cls(OAuthStatusKind.CONFIGURED)

    @classmethod
    def api_key_configured(cls) -> "OAuthStatus":
        return cls(OAuthStatusKind.API_KEY_CONFIGURED)

    @classmethod
    def wellknown_configured(cls) -> "OAuthStatus":
        return cls(OAuthStatusKind.WELLKNOWN_CONFIGURED)

    @classmethod
    def not_configured(cls) -> "OAuthStatus":
        return cls(OAuthStatusKind.NOT_CONFIGURED)

    @classmethod
    def unknown(cls, reason: str) -> "OAuthStatus":
        return cls(OAuthStatusKind.UNKNOWN, reason)

    @classmethod
    def from_auth_kind(cls, kind: AuthKind) -> "OAuthStatus":
        return {
            AuthKind.OAUTH: cls.configured,
            AuthKind.API: cls.api_key_configured,
            AuthKind.WELLKNOWN: cls.wellknown_configured,
        }[kind]()

    @property
    def is_configured(self) -> bool:
        return self.kind == OAuthStatusKind.CONFIGURED

    def __str__(self) -> str:
        if self.reason:
            return f"{self.kind.value}: {self.reason}"
        return self.kind.value


@dataclass
class LoadedCredentials:
    """Valid wrapped credentials and validation failures, keyed by provider.

    Providers whose source variable is absent appear in neither map.
    """

    valid: Dict[str, Secret] = field(default_factory=dict)
    invalid: Dict[str, KeyValidationError] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.valid and not self.invalid

    @property
    def total_found(self) -> int:
        return len(self.valid) + len(self.invalid)

    def wipe(self) -> None:
        for secret in self.valid.values():
            secret.wipe()


class SyncStatus(str, Enum):
    SYNCED = "synced"
    FAILED = "failed"
    SKIPPED = "skipped"
    VALIDATION_FAILED = "validation_failed"
    CANCELLED = "cancelled"


@dataclass
class SyncOutcome:
    """Result of attempting to push one provider's credential."""

    provider: str
    status: SyncStatus
    error_category: Optional[str] = None
    status_code: Optional[int] = None
    retryable: bool = False
    attempts: int = 0
    message: str = ""
    retry_after_seconds: Optional[float] = None
    oauth_status: Optional[OAuthStatus] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "status": self.status.value,
            "error_category": self.error_category,
            "status_code": self.status_code,
            "retryable": self.retryable,
            "attempts": self.attempts,
            "message": self.message,
            "retry_after_seconds": self.retry_after_seconds,
            "oauth_status": str(self.oauth_status) if self.oauth_status else None,
        }


class ReportKind(str, Enum):
    NOTHING_TO_SYNC = "nothing_to_sync"
    ALL_SKIPPED = "all_skipped"
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass
class SyncReport:
    """Aggregate result of one orchestration pass."""

    outcomes: List[SyncOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0
    was_cancelled: bool = False
    timed_out: bool = False
    correlation_id: Optional[str] = None

    def _with_status(self, status: SyncStatus) -> List[SyncOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def synced(self) -> List[SyncOutcome]:
        return self._with_status(SyncStatus.SYNCED)

    @property
    def failed(self) -> List[SyncOutcome]:
        return self._with_status(SyncStatus.FAILED)

    @property
    def skipped(self) -> List[SyncOutcome]:
        return self._with_status(SyncStatus.SKIPPED)

    @property
    def validation_failed(self) -> List[SyncOutcome]:
        return self._with_status(SyncStatus.VALIDATION_FAILED)

    @property
    def cancelled(self) -> List[SyncOutcome]:
        return self._with_status(SyncStatus.CANCELLED)

    def outcome_for(self, provider: str) -> Optional[SyncOutcome]:
        for outcome in self.outcomes:
            if outcome.provider == provider:
                return outcome
        return None

    @property
    def kind(self) -> ReportKind:
        """Classify the pass so callers can render an accurate summary."""
        if self.timed_out:
            return ReportKind.TIMED_OUT
        if self.was_cancelled:
            return ReportKind.CANCELLED
        if not self.outcomes:
            return ReportKind.NOTHING_TO_SYNC

        failures = len(self.failed) + len(self.validation_failed)
        if not self.synced and not failures:
            return ReportKind.ALL_SKIPPED
        if not failures:
            return ReportKind.SUCCESS
        if self.synced:
            return ReportKind.PARTIAL_FAILURE
        return ReportKind.TOTAL_FAILURE

    def summary(self) -> str:
        """Human readable one-liner, e.g. "2 synced, 1 failed, 1 OAuth"."""
        if not self.outcomes:
            return "No API keys found"

        parts = []
        if self.synced:
            parts.append(f"{len(self.synced)} synced")
        if self.failed:
            parts.append(f"{len(self.failed)} failed")
        if self.skipped:
            parts.append(f"{len(self.skipped)} OAuth")
        if self.validation_failed:
            parts.append(f"{len(self.validation_failed)} invalid")
        if self.cancelled:
            parts.append(f"{len(self.cancelled)} cancelled")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "summary": self.summary(),
            "correlation_id": self.correlation_id,
            "duration_seconds": round(self.duration_seconds, 3),
            "was_cancelled": self.was_cancelled,
            "timed_out": self.timed_out,
            "synced": [o.to_dict() for o in self.synced],
            "failed": [o.to_dict() for o in self.failed],
            "skipped": [o.to_dict() for o in self.skipped],
            "validation_failed": [o.to_dict() for o in self.validation_failed],
            "cancelled": [o.to_dict() for o in self.cancelled],
        }
