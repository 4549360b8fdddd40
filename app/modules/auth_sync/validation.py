"""Provider-aware validation of candidate API keys.

Checks run in a fixed order and the first failure wins:
1. Empty after trimming
2. Length within [min_length, max_length]
3. Expected prefix, when the provider defines one
4. Placeholder patterns (case-insensitive) and single repeated characters
5. Character class: ASCII alphanumerics plus - _ . :

Validation is pure: no I/O, no logging, nothing mutated.
"""

import re
from typing import Optional

from modules.auth_sync.models import InvalidReason, ValidationOutcome
from modules.auth_sync.providers import ProviderDefinition

# (substring, reported pattern name), checked in order against the lowercased key
PLACEHOLDER_PATTERNS = (
    ("...", "ellipsis"),
    ("your-api-key", "your-api-key"),
    ("your_api_key", "your_api_key"),
    ("insert", "INSERT"),
    ("<your", "<your...>"),
    ("xxx", "xxx"),
    ("placeholder", "placeholder"),
    ("example", "example"),
    ("test-key", "test-key"),
    ("dummy", "dummy"),
    ("fake", "fake"),
    ("replace", "replace"),
    ("put-your", "put-your"),
    ("add-your", "add-your"),
    ("enter-your", "enter-your"),
)

REPEATED_CHAR_MIN_LENGTH = 10

VALID_KEY_CHARS = re.compile(r"[A-Za-z0-9\-_.:]+")


def detect_placeholder(key: str) -> Optional[str]:
    """Return the name of the placeholder pattern found in ``key``, if any."""
    lower = key.lower()
    for pattern, name in PLACEHOLDER_PATTERNS:
        if pattern in lower:
            return name

    if len(key) >= REPEATED_CHAR_MIN_LENGTH and len(set(key)) == 1:
        return "repeated_char"

    return None


def has_valid_key_chars(key: str) -> bool:
    return bool(VALID_KEY_CHARS.fullmatch(key))


def validate(definition: ProviderDefinition, candidate: str) -> ValidationOutcome:
    """Validate a candidate credential against a provider definition.

    Args:
        definition: Provider rules (prefix, length bounds)
        candidate: Raw value as read from the environment

    Returns:
        ValidationOutcome, valid or carrying the first failing reason
    """
    key = candidate.strip()

    if not key:
        return ValidationOutcome.invalid(InvalidReason.EMPTY, "key is empty")

    if len(key) < definition.min_length:
        return ValidationOutcome.invalid(
            InvalidReason.TOO_SHORT,
            f"key too short ({len(key)} chars, minimum {definition.min_length})",
        )

    if len(key) > definition.max_length:
        return ValidationOutcome.invalid(
            InvalidReason.TOO_LONG,
            f"key too long ({len(key)} chars, maximum {definition.max_length})",
        )

    expected = definition.expected_prefix
    if expected and not key.startswith(expected):
        actual = key[: len(expected)]
        return ValidationOutcome.invalid(
            InvalidReason.INVALID_PREFIX,
            f"expected prefix '{expected}', got '{actual}'",
            expected_prefix=expected,
            actual_prefix=actual,
        )

    pattern = detect_placeholder(key)
    if pattern is not None:
        return ValidationOutcome.invalid(
            InvalidReason.PLACEHOLDER_DETECTED,
            f"detected placeholder pattern '{pattern}'",
            pattern=pattern,
        )

    if not has_valid_key_chars(key):
        return ValidationOutcome.invalid(
            InvalidReason.INVALID_CHARACTERS, "contains invalid characters"
        )

    return ValidationOutcome.valid()
