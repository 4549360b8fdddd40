"""Provider definitions and well-known key formats.

A ``ProviderDefinition`` is the static description of one credential
provider: where its key comes from and what a valid key looks like.
Providers without a documented key format get permissive rules so they
are not rejected outright.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class KeyFormat:
    """Expected shape of a provider API key."""

    expected_prefix: Optional[str]
    min_length: int
    max_length: int


DEFAULT_KEY_FORMAT = KeyFormat(expected_prefix=None, min_length=10, max_length=500)

# Documented, stable key formats
WELL_KNOWN_KEY_FORMATS: Dict[str, KeyFormat] = {
    "openai": KeyFormat(expected_prefix="sk-", min_length=20, max_length=200),
    "anthropic": KeyFormat(expected_prefix="sk-ant-", min_length=40, max_length=200),
    "google": KeyFormat(expected_prefix="AI", min_length=30, max_length=100),
    "google_generativeai": KeyFormat(expected_prefix="AI", min_length=30, max_length=100),
    "mistral": KeyFormat(expected_prefix=None, min_length=32, max_length=64),
    "cohere": KeyFormat(expected_prefix=None, min_length=30, max_length=100),
}


def key_format_for(provider: str) -> KeyFormat:
    """Return the key format for a provider name, permissive if unknown."""
    return WELL_KNOWN_KEY_FORMATS.get(provider.lower(), DEFAULT_KEY_FORMAT)


@dataclass(frozen=True)
class ProviderDefinition:
    """Static description of one credential provider.

    Attributes:
        name: Provider id used by the remote service (e.g. "anthropic")
        source_env_var: Environment variable holding the API key
        expected_prefix: Required key prefix, None when the format has none
        min_length: Minimum accepted key length (after trimming)
        max_length: Maximum accepted key length (after trimming)
    """

    name: str
    source_env_var: str
    expected_prefix: Optional[str] = None
    min_length: int = DEFAULT_KEY_FORMAT.min_length
    max_length: int = DEFAULT_KEY_FORMAT.max_length

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("provider name must not be empty")
        if self.min_length < 1:
            raise ValueError(f"{self.name}: min_length must be at least 1")
        if self.max_length < self.min_length:
            raise ValueError(f"{self.name}: max_length must be >= min_length")

    @classmethod
    def for_provider(
        cls, name: str, source_env_var: str, **overrides: Any
    ) -> "ProviderDefinition":
        """Build a definition that inherits well-known rules for ``name``.

        Explicit ``expected_prefix``/``min_length``/``max_length`` overrides
        win over the inherited rules.
        """
        key_format = key_format_for(name)
        definition = cls(
            name=name,
            source_env_var=source_env_var,
            expected_prefix=key_format.expected_prefix,
            min_length=key_format.min_length,
            max_length=key_format.max_length,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(definition, **overrides) if overrides else definition


BUILTIN_PROVIDERS: List[ProviderDefinition] = [
    ProviderDefinition.for_provider("openai", "OPENAI_API_KEY"),
    ProviderDefinition.for_provider("anthropic", "ANTHROPIC_API_KEY"),
    ProviderDefinition.for_provider("google", "GOOGLE_GENERATIVE_AI_API_KEY"),
    ProviderDefinition.for_provider("mistral", "MISTRAL_API_KEY"),
    ProviderDefinition.for_provider("cohere", "COHERE_API_KEY"),
]


def definitions_from_config(entries: Iterable[Dict[str, Any]]) -> List[ProviderDefinition]:
    """Convert configured provider entries into definitions.

    Each entry needs ``name`` and may set ``api_key_env``, ``expected_prefix``,
    ``min_length`` and ``max_length``. An empty ``api_key_env`` is kept; the
    loader skips such providers.
    """
    definitions = []
    for entry in entries:
        definitions.append(
            ProviderDefinition.for_provider(
                entry["name"],
                entry.get("api_key_env") or "",
                expected_prefix=entry.get("expected_prefix"),
                min_length=entry.get("min_length"),
                max_length=entry.get("max_length"),
            )
        )
    return definitions


def definitions_from_settings(auth_sync_settings: Any) -> List[ProviderDefinition]:
    """Provider definitions for the current configuration.

    Falls back to the built-in list when AUTH_SYNC_PROVIDERS is empty.
    """
    if not auth_sync_settings.providers:
        return list(BUILTIN_PROVIDERS)
    return definitions_from_config(auth_sync_settings.providers)
