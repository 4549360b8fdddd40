"""Retry infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class RetrySettings(InfrastructureSettings):
    """Retry policy for remote credential pushes.

    Controls the bounded attempt loop the sync orchestrator runs for each
    provider. Only failures classified as retryable (timeouts, connection
    failures, HTTP 429/502/503/504) consume additional attempts.

    Environment Variables:
        RETRY_MAX_ATTEMPTS: Attempts per provider, first one included (default: 3)
        RETRY_BASE_DELAY_SECONDS: Delay before the second attempt (default: 0.2s)
        RETRY_MAX_DELAY_SECONDS: Cap for the exponential delay (default: 2s)
        RETRY_BACKOFF_MULTIPLIER: Growth factor between delays (default: 2.0)
        RETRY_JITTER: Randomize delays to avoid synchronized retries (default: False)

    Exponential Backoff:
        Delay calculation: min(base_delay * (multiplier ^ (attempt - 1)), max_delay)

        Example with defaults (base=0.2s, max=2s):
            After attempt 1: 0.2s
            After attempt 2: 0.4s
            After attempt 3: 0.8s

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        max_attempts = settings.retry.max_attempts
        ```
    """

    max_attempts: int = Field(
        default=3,
        alias="RETRY_MAX_ATTEMPTS",
        description="Attempts per provider before recording a failure",
    )
    base_delay_seconds: float = Field(
        default=0.2,
        alias="RETRY_BASE_DELAY_SECONDS",
        description="Base delay for exponential backoff (seconds)",
    )
    max_delay_seconds: float = Field(
        default=2.0,
        alias="RETRY_MAX_DELAY_SECONDS",
        description="Maximum delay for exponential backoff (seconds)",
    )
    backoff_multiplier: float = Field(
        default=2.0,
        alias="RETRY_BACKOFF_MULTIPLIER",
        description="Multiplier applied to the delay after each attempt",
    )
    jitter: bool = Field(
        default=False,
        alias="RETRY_JITTER",
        description="Add random jitter to backoff delays",
    )
