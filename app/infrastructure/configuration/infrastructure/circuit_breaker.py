"""Circuit breaker infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class CircuitBreakerSettings(InfrastructureSettings):
    """Per-provider circuit breaker configuration.

    Environment Variables:
        CIRCUIT_BREAKER_FAILURE_THRESHOLD: Retryable failures inside the window
            that open the circuit (default: 5)
        CIRCUIT_BREAKER_SUCCESS_THRESHOLD: Successes in HALF_OPEN needed to
            close the circuit again (default: 2)
        CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS: Time spent OPEN before the next
            admission check moves to HALF_OPEN (default: 60s)
        CIRCUIT_BREAKER_FAILURE_WINDOW_SECONDS: Sliding window for counting
            failures (default: 60s)
    """

    failure_threshold: int = Field(
        default=5,
        alias="CIRCUIT_BREAKER_FAILURE_THRESHOLD",
        description="In-window retryable failures before opening circuit",
    )
    success_threshold: int = Field(
        default=2,
        alias="CIRCUIT_BREAKER_SUCCESS_THRESHOLD",
        description="HALF_OPEN successes before closing circuit",
    )
    reset_timeout_seconds: float = Field(
        default=60.0,
        alias="CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS",
        description="Seconds before attempting recovery (HALF_OPEN state)",
    )
    failure_window_seconds: float = Field(
        default=60.0,
        alias="CIRCUIT_BREAKER_FAILURE_WINDOW_SECONDS",
        description="Sliding window used when counting failures (seconds)",
    )
