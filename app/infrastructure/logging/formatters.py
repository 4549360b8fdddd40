"""Custom log processors for structured logging.

This module provides processors that are plugged into the structlog
pipeline by ``configure_logging()``. They keep credential material out of
every rendered log line.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data, redact_secrets

Dependencies:
    - structlog processors
    - infrastructure.security.Secret
"""

from typing import Any

from infrastructure.security.secret import REDACTION_MARKER, Secret


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Create a processor that adds application info to log entries.

    Args:
        app_name: Name of the application.
        app_version: Version string for the application.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


# Sensitive field patterns that should be masked in logs
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "private_key",
        "access_token",
        "refresh_token",
        "cookie",
        "jwt",
        "bearer",
    }
)


def _is_sensitive(key: str, patterns: frozenset[str]) -> bool:
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in patterns)


def _mask(value: Any, patterns: frozenset[str], mask_value: str) -> Any:
    if isinstance(value, dict):
        return {
            k: (
                mask_value
                if isinstance(k, str) and _is_sensitive(k, patterns) and v is not None
                else _mask(v, patterns, mask_value)
            )
            for k, v in value.items()
        }
    return value


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive data in log entries.

    Values whose key contains a sensitive pattern (case-insensitive) are
    replaced, including keys of nested dictionaries.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        return _mask(event_dict, patterns, mask_value)

    return processor


def _redact(value: Any) -> Any:
    if isinstance(value, Secret):
        return REDACTION_MARKER
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v) for v in value)
    return value


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace any Secret instance in the event with the redaction marker.

    Secrets already render redacted, this keeps JSON renderers from choking
    on them and covers secrets nested inside containers.
    """
    return {key: _redact(value) for key, value in event_dict.items()}


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Remote error bodies can be arbitrarily long; this keeps them bounded.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
