"""Resilience patterns and implementations.

This module contains the circuit breaker (with its process-lifetime
registry) and the bounded retry policy used for remote calls.
"""

from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitBreakerRegistry,
    CircuitState,
)
from infrastructure.resilience.retry import RetryConfig

__all__ = [
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitBreakerRegistry",
    "CircuitState",
    # Retry
    "RetryConfig",
]
