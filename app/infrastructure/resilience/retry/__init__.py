"""Retry policy for remote operations.

Usage:
    from infrastructure.resilience.retry import RetryConfig

    config = RetryConfig.from_settings(settings.retry)
    for attempt in range(1, config.max_attempts + 1):
        ...
        await asyncio.sleep(config.delay_for_attempt(attempt))
"""

from infrastructure.resilience.retry.config import RetryConfig

__all__ = [
    "RetryConfig",
]
