"""Context binding for structured logging.

Binds a correlation ID (and optional metadata) to every log entry emitted
while a sync pass or an HTTP request is being processed.

Usage:
    from infrastructure.logging import bind_sync_context

    with bind_sync_context(trigger="api"):
        logger.info("sync_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_sync_context(
    correlation_id: Optional[str] = None,
    trigger: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind a correlation ID to all logs within the context manager.

    Args:
        correlation_id: Unique pass identifier. Auto-generated if not provided.
        trigger: What started the pass (e.g. "api", "startup").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation ID in effect for the block.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if trigger is not None:
        context["trigger"] = trigger
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())

