"""Structured logging infrastructure.

This package provides centralized logging configuration and utilities
for the auth sync service using structlog. Every configured pipeline
redacts Secret values and masks sensitive keys before rendering.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_sync_context(): Context manager binding a correlation ID

Formatters:
    - add_app_info(): Processor to add app name/version
    - redact_secrets(): Processor replacing Secret values with a marker
    - mask_sensitive_data(): Processor to redact sensitive fields
    - truncate_large_values(): Processor to limit string lengths
"""

from infrastructure.logging.setup import (
    build_processors,
    configure_logging,
    get_logger,
    get_module_logger,
)

from infrastructure.logging.context import bind_sync_context

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    redact_secrets,
    truncate_large_values,
)

__all__ = [
    # Setup
    "build_processors",
    "configure_logging",
    "get_logger",
    "get_module_logger",
    # Context
    "bind_sync_context",
    # Formatters
    "SENSITIVE_PATTERNS",
    "add_app_info",
    "mask_sensitive_data",
    "redact_secrets",
    "truncate_large_values",
]
