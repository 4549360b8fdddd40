"""Credential sync feature settings."""

import json
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator
import structlog

from infrastructure.configuration.base import FeatureSettings

logger = structlog.stdlib.get_logger().bind(component="config")


class AuthSyncSettings(FeatureSettings):
    """Credential sync feature configuration.

    Environment Variables:
        AUTH_SYNC_REMOTE_URL: Base URL of the remote service receiving credentials.
            Empty means no remote is configured and sync passes are refused.
        AUTH_SYNC_REMOTE_USERNAME: Optional HTTP basic auth username for the remote
        AUTH_SYNC_REMOTE_PASSWORD: Optional HTTP basic auth password for the remote
        AUTH_SYNC_SKIP_OAUTH_PROVIDERS: Skip providers the remote already has OAuth
            credentials for (default: True)
        AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS: Upper bound for one sync pass (default: 30s)
        AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS: Upper bound for one remote call (default: 10s)
        AUTH_SYNC_LOCK_WAIT_SECONDS: How long a second caller waits for the
            single-flight gate before being rejected (default: 0.1s)
        AUTH_SYNC_DOTENV_PATH: Explicit .env file with credential overrides
        AUTH_SYNC_PROVIDERS: JSON list of provider definitions, each with
            "name" and "api_key_env" plus optional "expected_prefix",
            "min_length", "max_length". Empty means the built-in list.

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.auth_sync.remote_url:
            timeout = settings.auth_sync.global_timeout_seconds
        ```
    """

    remote_url: str = Field(
        default="",
        alias="AUTH_SYNC_REMOTE_URL",
        description="Base URL of the remote service",
    )
    remote_username: str = Field(
        default="",
        alias="AUTH_SYNC_REMOTE_USERNAME",
        description="HTTP basic auth username for the remote service",
    )
    remote_password: str = Field(
        default="",
        alias="AUTH_SYNC_REMOTE_PASSWORD",
        description="HTTP basic auth password for the remote service",
    )
    skip_oauth_providers: bool = Field(
        default=True,
        alias="AUTH_SYNC_SKIP_OAUTH_PROVIDERS",
        description="Skip providers with OAuth already configured",
    )
    global_timeout_seconds: float = Field(
        default=30.0,
        alias="AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS",
        description="Overall timeout for one sync pass (seconds)",
    )
    attempt_timeout_seconds: float = Field(
        default=10.0,
        alias="AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS",
        description="Timeout for a single remote call (seconds)",
    )
    lock_wait_seconds: float = Field(
        default=0.1,
        alias="AUTH_SYNC_LOCK_WAIT_SECONDS",
        description="Wait on the single-flight gate before rejecting (seconds)",
    )
    dotenv_path: Optional[str] = Field(
        default=None,
        alias="AUTH_SYNC_DOTENV_PATH",
        description="Explicit .env file to read credential overrides from",
    )
    providers: list[dict] = Field(
        default_factory=list,
        alias="AUTH_SYNC_PROVIDERS",
        description="Provider definitions; empty means the built-in list",
    )

    @field_validator("providers", mode="before")
    @classmethod
    def _parse_providers(cls, v: Optional[Any]) -> Any:
        """Parse AUTH_SYNC_PROVIDERS from JSON string or list."""
        if v is None:
            return []
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if (s.startswith("'") and s.endswith("'")) or (
                s.startswith('"') and s.endswith('"')
            ):
                s = s[1:-1]
            try:
                return json.loads(s) if s else []
            except (json.JSONDecodeError, ValueError) as e:
                raise ValueError(
                    f"Invalid AUTH_SYNC_PROVIDERS JSON: {e} (value: {s[:80]}...)"
                ) from e
        raise ValueError("AUTH_SYNC_PROVIDERS must be a JSON string or a list")

    @field_validator("providers", mode="after")
    @classmethod
    def _validate_providers(cls, v: list[dict]) -> list[dict]:
        """Every provider entry needs a name; duplicate names are rejected."""
        seen: set[str] = set()
        for entry in v:
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ValueError("Each AUTH_SYNC_PROVIDERS entry needs a 'name'")
            if entry["name"] in seen:
                raise ValueError(f"Duplicate provider '{entry['name']}' in AUTH_SYNC_PROVIDERS")
            seen.add(entry["name"])
            if not entry.get("api_key_env"):
                logger.warning("provider_missing_api_key_env", provider=entry["name"])
        return v

    @model_validator(mode="after")
    def _validate_timeouts(self) -> "AuthSyncSettings":
        if self.global_timeout_seconds <= 0:
            raise ValueError("AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS must be positive")
        if not 0 < self.attempt_timeout_seconds < self.global_timeout_seconds:
            raise ValueError(
                "AUTH_SYNC_ATTEMPT_TIMEOUT_SECONDS must be positive and shorter "
                "than AUTH_SYNC_GLOBAL_TIMEOUT_SECONDS"
            )
        return self
