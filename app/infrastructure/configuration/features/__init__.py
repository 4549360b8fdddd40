"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.auth_sync import AuthSyncSettings

__all__ = [
    "AuthSyncSettings",
]
