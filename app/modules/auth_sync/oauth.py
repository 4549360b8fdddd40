"""OAuth status resolution from the local credential store.

The store (``auth.json``) maps provider name to an entry tagged by
``type``. Entries are decoded through a closed pydantic union; anything
that does not fit it is reported as ``Unknown`` instead of raising.

Outcomes:
- Store location cannot be determined: NotConfigured (logged as a warning)
- File missing or provider absent: NotConfigured
- File unreadable, invalid JSON, or malformed entry: Unknown(reason)

The store is only ever read.
"""

import json
from pathlib import Path
from typing import Annotated, Any, Callable, Dict, Iterable, Literal, Optional, Union

from pydantic import BaseModel, Field, SecretStr, TypeAdapter, ValidationError

from infrastructure.logging import get_module_logger
from modules.auth_sync.errors import PathDetectionError
from modules.auth_sync.models import OAuthStatus
from modules.auth_sync.paths import StorePath, resolve_store_path

logger = get_module_logger()


class OAuthEntry(BaseModel):
    type: Literal["oauth"]
    access: SecretStr
    refresh: SecretStr
    expires: float

    def to_status(self) -> OAuthStatus:
        return OAuthStatus.configured()


class ApiKeyEntry(BaseModel):
    type: Literal["api"]
    key: SecretStr

    def to_status(self) -> OAuthStatus:
        return OAuthStatus.api_key_configured()


class WellKnownEntry(BaseModel):
    type: Literal["wellknown"]
    key: SecretStr
    token: SecretStr

    def to_status(self) -> OAuthStatus:
        return OAuthStatus.wellknown_configured()


AuthEntry = Annotated[
    Union[OAuthEntry, ApiKeyEntry, WellKnownEntry], Field(discriminator="type")
]

_entry_adapter: TypeAdapter = TypeAdapter(AuthEntry)


def _describe_validation_error(error: ValidationError) -> str:
    # Field locations and error types only; input values may be secrets.
    parts = []
    for detail in error.errors(include_input=False, include_url=False):
        location = ".".join(str(item) for item in detail.get("loc", ())) or "entry"
        parts.append(f"{location}: {detail.get('type')}")
    return "; ".join(parts)


def classify_entry(raw: Any) -> OAuthStatus:
    """Classify one raw store entry."""
    try:
        entry = _entry_adapter.validate_python(raw)
    except ValidationError as e:
        return OAuthStatus.unknown(
            f"Auth info parse error: {_describe_validation_error(e)}"
        )
    return entry.to_status()


class OAuthStatusResolver:
    """Reads the credential store and classifies provider auth modes.

    Args:
        path_resolver: Callable returning the StorePath; raises
            PathDetectionError when no location can be determined
    """

    def __init__(self, path_resolver: Callable[[], StorePath] = resolve_store_path):
        self._path_resolver = path_resolver

    def _load_store(self) -> Union[Dict[str, Any], OAuthStatus]:
        """Return the decoded store, or the status every provider gets."""
        try:
            store = self._path_resolver()
        except PathDetectionError as e:
            logger.warning("credential_store_path_unresolved", error=str(e))
            return OAuthStatus.not_configured()

        auth_file = Path(store.auth_file)
        logger.debug(
            "checking_credential_store",
            auth_file=str(auth_file),
            source=store.source.value,
        )

        try:
            content = auth_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("credential_store_not_found", auth_file=str(auth_file))
            return OAuthStatus.not_configured()
        except PermissionError as e:
            logger.warning("credential_store_permission_denied", error=str(e))
            return OAuthStatus.unknown(f"Permission denied: {e}")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("credential_store_read_failed", error=str(e))
            return OAuthStatus.unknown(f"Read error: {e}")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("credential_store_parse_failed", error=str(e))
            return OAuthStatus.unknown(f"Parse error: {e}")

        if not isinstance(data, dict):
            logger.warning(
                "credential_store_parse_failed", error="top level is not an object"
            )
            return OAuthStatus.unknown("Parse error: top level is not an object")

        return data

    def _status_from(self, data: Dict[str, Any], provider: str) -> OAuthStatus:
        if provider not in data:
            logger.debug("credential_store_provider_absent", provider=provider)
            return OAuthStatus.not_configured()

        status = classify_entry(data[provider])
        if status.is_configured:
            logger.info("provider_oauth_configured", provider=provider)
        else:
            logger.debug("provider_auth_status", provider=provider, status=str(status))
        return status

    def resolve(self, provider: str) -> OAuthStatus:
        """Resolve the auth status of one provider. Never raises."""
        loaded = self._load_store()
        if isinstance(loaded, OAuthStatus):
            return loaded
        return self._status_from(loaded, provider)

    def resolve_batch(self, providers: Iterable[str]) -> Dict[str, OAuthStatus]:
        """Resolve several providers with a single read of the store."""
        providers = list(providers)
        loaded = self._load_store()
        if isinstance(loaded, OAuthStatus):
            return {provider: loaded for provider in providers}
        return {provider: self._status_from(loaded, provider) for provider in providers}


def resolve_oauth_status(
    provider: str, path_resolver: Optional[Callable[[], StorePath]] = None
) -> OAuthStatus:
    """Convenience wrapper resolving a single provider."""
    resolver = OAuthStatusResolver(path_resolver or resolve_store_path)
    return resolver.resolve(provider)
