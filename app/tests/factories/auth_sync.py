"""Factory functions for credential sync test data."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional
from unittest.mock import AsyncMock

from modules.auth_sync.providers import BUILTIN_PROVIDERS, ProviderDefinition

# Mixed-case alphanumerics that match no placeholder pattern
_KEY_BODY = "Ab3dE6gH9jK2mN5p" * 8

_PREFIXES = {
    "openai": "sk-",
    "anthropic": "sk-ant-",
    "google": "AI",
}

_BODY_LENGTHS = {
    "openai": 30,
    "anthropic": 40,
    "google": 36,
    "mistral": 40,
    "cohere": 40,
}


def make_api_key(provider: str = "openai", body_length: Optional[int] = None) -> str:
    """Create an API key that passes validation for a built-in provider.

    Args:
        provider: Provider name whose format the key should match
        body_length: Characters after the prefix; defaults per provider

    Returns:
        A syntactically valid key string
    """
    length = body_length if body_length is not None else _BODY_LENGTHS.get(provider, 24)
    return _PREFIXES.get(provider, "") + _KEY_BODY[:length]


def make_provider_definition(
    name: str = "openai",
    source_env_var: Optional[str] = None,
    **overrides: Any,
) -> ProviderDefinition:
    """Create a provider definition inheriting well-known rules for ``name``."""
    env_var = source_env_var or f"{name.upper()}_API_KEY"
    return ProviderDefinition.for_provider(name, env_var, **overrides)


def builtin_definitions(*names: str) -> list[ProviderDefinition]:
    """Built-in definitions, optionally restricted to ``names`` (kept in order)."""
    if not names:
        return list(BUILTIN_PROVIDERS)
    return [d for d in BUILTIN_PROVIDERS if d.name in names]


def make_oauth_entry(expires: float = 1893456000000) -> Dict[str, Any]:
    return {
        "type": "oauth",
        "access": "access-token-value",
        "refresh": "refresh-token-value",
        "expires": expires,
    }


def make_api_entry(key: str = "stored-key-value") -> Dict[str, Any]:
    return {"type": "api", "key": key}


def make_wellknown_entry() -> Dict[str, Any]:
    return {"type": "wellknown", "key": "wk-key", "token": "wk-token"}


def write_auth_store(data_dir: Path, entries: Any) -> Path:
    """Write an auth.json credential store under ``data_dir``.

    Args:
        data_dir: Directory to create the store in
        entries: JSON-serializable content (normally provider -> entry)

    Returns:
        Path of the written auth.json
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    auth_file = data_dir / "auth.json"
    auth_file.write_text(json.dumps(entries), encoding="utf-8")
    return auth_file


def make_remote_client(
    put_side_effect: Optional[Iterable[Any]] = None,
    status: Any = None,
) -> AsyncMock:
    """Create a mock RemoteSyncClient.

    Args:
        put_side_effect: Sequence of results for successive put_credential
            calls; exceptions in it are raised
        status: Return value (or exception) for get_credential_status

    Returns:
        AsyncMock exposing put_credential, get_credential_status and aclose
    """
    client = AsyncMock()
    client.put_credential = AsyncMock(
        side_effect=list(put_side_effect) if put_side_effect is not None else None,
        return_value=None,
    )
    if isinstance(status, BaseException):
        client.get_credential_status = AsyncMock(side_effect=status)
    else:
        client.get_credential_status = AsyncMock(return_value=status)
    client.aclose = AsyncMock(return_value=None)
    return client
