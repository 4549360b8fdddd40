"""Infrastructure security utilities.

This module provides the redacted secret container used wherever a raw
credential travels through the application.

Exports:
    Secret: Credential wrapper that never exposes its value implicitly
    SecretSerializationError: Raised when a Secret is pickled or serialized
    REDACTION_MARKER: Text rendered in place of a secret value
"""

from infrastructure.security.secret import (
    REDACTION_MARKER,
    Secret,
    SecretSerializationError,
)

__all__ = [
    "REDACTION_MARKER",
    "Secret",
    "SecretSerializationError",
]
