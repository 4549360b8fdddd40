"""Circuit breaker implementation for remote provider resilience.

The circuit breaker pattern prevents hammering an unhealthy endpoint:
1. CLOSED state: Normal operation, requests are admitted
2. OPEN state: Fast-fail requests without calling the remote
3. HALF_OPEN state: Admit requests to test recovery

State transitions:
- CLOSED -> OPEN: When failures inside the sliding window reach failure_threshold
- OPEN -> HALF_OPEN: On the first admission check after reset_timeout elapsed
- HALF_OPEN -> CLOSED: After success_threshold successes
- HALF_OPEN -> OPEN: On any failure

Only failures the caller classifies as retryable should be recorded; a
client error says nothing about the health of the endpoint.
"""

import threading
import time
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests immediately
    HALF_OPEN = "half_open"  # Testing recovery


class CircuitBreakerOpenError(Exception):
    """Raised when the circuit breaker is open and a request is rejected.

    Attributes:
        name: Name of the circuit that rejected the request
        retry_after: Seconds until the circuit will admit a probe request
    """

    category = "circuit_open"
    is_retryable = False

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = max(0.0, retry_after)
        super().__init__(
            f"Circuit breaker '{name}' is OPEN. Retry in {self.retry_after:.1f} seconds."
        )


class CircuitBreaker:
    """Sliding-window circuit breaker for one remote dependency.

    Args:
        name: Name of the circuit (typically provider name)
        failure_threshold: In-window failures before opening
        success_threshold: Half-open successes before closing
        reset_timeout_seconds: Seconds to stay OPEN before probing
        failure_window_seconds: Age after which a failure no longer counts
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        reset_timeout_seconds: float = 60.0,
        failure_window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if success_threshold < 1:
            raise ValueError("success_threshold must be at least 1")

        self.name = name
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.reset_timeout_seconds = reset_timeout_seconds
        self.failure_window_seconds = failure_window_seconds
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failures: Deque[float] = deque()
        self._success_count = 0
        self._last_transition_time = clock()
        self._total_rejections = 0

        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Get current circuit state (without triggering a transition)."""
        with self._lock:
            return self._state

    def check_admission(self) -> None:
        """Decide whether a request may proceed.

        An OPEN circuit whose reset timeout has elapsed moves to HALF_OPEN
        here, atomically with the check.

        Raises:
            CircuitBreakerOpenError: If the circuit is open.
        """
        with self._lock:
            if self._state != CircuitState.OPEN:
                return

            elapsed = self._clock() - self._last_transition_time
            if elapsed >= self.reset_timeout_seconds:
                self._transition_to_half_open()
                return

            remaining = self.reset_timeout_seconds - elapsed
            self._total_rejections += 1
            logger.warning(
                "circuit_breaker_rejected",
                name=self.name,
                retry_in_seconds=round(remaining, 2),
            )
            raise CircuitBreakerOpenError(self.name, remaining)

    def is_admitted(self) -> bool:
        """Non-raising variant of ``check_admission()``."""
        try:
            self.check_admission()
        except CircuitBreakerOpenError:
            return False
        return True

    def record_success(self) -> None:
        """Record a successful request."""
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                logger.info(
                    "circuit_breaker_success_half_open",
                    name=self.name,
                    success_count=self._success_count,
                    threshold=self.success_threshold,
                )
                if self._success_count >= self.success_threshold:
                    self._transition_to_closed()

    def record_failure(self, error: Optional[BaseException] = None) -> None:
        """Record a retryable failure."""
        with self._lock:
            now = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                logger.warning(
                    "circuit_breaker_recovery_failed",
                    name=self.name,
                    error=str(error) if error else None,
                )
                self._failures.append(now)
                self._transition_to_open()
                return

            if self._state == CircuitState.OPEN:
                return

            self._failures.append(now)
            self._prune_failures(now)

            if len(self._failures) >= self.failure_threshold:
                logger.error(
                    "circuit_breaker_threshold_exceeded",
                    name=self.name,
                    failure_count=len(self._failures),
                    threshold=self.failure_threshold,
                    error=str(error) if error else None,
                )
                self._transition_to_open()
            else:
                logger.warning(
                    "circuit_breaker_failure",
                    name=self.name,
                    failure_count=len(self._failures),
                    threshold=self.failure_threshold,
                    error=str(error) if error else None,
                )

    def _prune_failures(self, now: float) -> None:
        cutoff = now - self.failure_window_seconds
        while self._failures and self._failures[0] < cutoff:
            self._failures.popleft()

    def _transition_to_closed(self) -> None:
        logger.info("circuit_breaker_closed", name=self.name)
        self._state = CircuitState.CLOSED
        self._failures.clear()
        self._success_count = 0
        self._last_transition_time = self._clock()

    def _transition_to_open(self) -> None:
        logger.error(
            "circuit_breaker_opened",
            name=self.name,
            reset_timeout_seconds=self.reset_timeout_seconds,
        )
        self._state = CircuitState.OPEN
        self._success_count = 0
        self._last_transition_time = self._clock()

    def _transition_to_half_open(self) -> None:
        logger.info("circuit_breaker_half_open", name=self.name)
        self._state = CircuitState.HALF_OPEN
        self._success_count = 0
        self._last_transition_time = self._clock()

    def get_stats(self) -> dict:
        """Get circuit breaker statistics."""
        with self._lock:
            now = self._clock()
            self._prune_failures(now)
            retry_after = None
            if self._state == CircuitState.OPEN:
                retry_after = max(
                    0.0,
                    self.reset_timeout_seconds - (now - self._last_transition_time),
                )
            return {
                "name": self.name,
                "state": self._state.value,
                "failure_count": len(self._failures),
                "success_count": self._success_count,
                "failure_threshold": self.failure_threshold,
                "seconds_since_transition": round(now - self._last_transition_time, 3),
                "retry_after_seconds": retry_after,
                "total_rejections": self._total_rejections,
            }

    def reset(self) -> None:
        """Manually reset circuit breaker (for testing/admin operations)."""
        with self._lock:
            logger.info("circuit_breaker_manual_reset", name=self.name)
            self._transition_to_closed()


class CircuitBreakerRegistry:
    """Process-lifetime map of circuit breakers keyed by name.

    Breakers are created lazily with the registry's defaults. The registry
    is owned by the application context; sync passes borrow it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        reset_timeout_seconds: float = 60.0,
        failure_window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._defaults: Dict[str, Any] = {
            "failure_threshold": failure_threshold,
            "success_threshold": success_threshold,
            "reset_timeout_seconds": reset_timeout_seconds,
            "failure_window_seconds": failure_window_seconds,
            "clock": clock,
        }
        self._breakers: Dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "CircuitBreakerRegistry":
        """Build a registry from ``CircuitBreakerSettings``."""
        params = {
            "failure_threshold": settings.failure_threshold,
            "success_threshold": settings.success_threshold,
            "reset_timeout_seconds": settings.reset_timeout_seconds,
            "failure_window_seconds": settings.failure_window_seconds,
        }
        params.update(overrides)
        return cls(**params)

    def get(self, name: str) -> CircuitBreaker:
        """Return the breaker for ``name``, creating it on first use."""
        with self._lock:
            breaker = self._breakers.get(name)
            if breaker is None:
                breaker = CircuitBreaker(name, **self._defaults)
                self._breakers[name] = breaker
            return breaker

    def reset(self, name: str) -> bool:
        """Reset one breaker. Returns False when no breaker exists."""
        with self._lock:
            breaker = self._breakers.get(name)
        if breaker is None:
            return False
        breaker.reset()
        return True

    def reset_all(self) -> None:
        with self._lock:
            breakers = list(self._breakers.values())
        for breaker in breakers:
            breaker.reset()

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._breakers)

    def get_all_stats(self) -> dict:
        """Get statistics for all circuit breakers."""
        with self._lock:
            breakers = list(self._breakers.values())
        return {breaker.name: breaker.get_stats() for breaker in breakers}

    def get_states(self) -> Dict[str, CircuitState]:
        with self._lock:
            breakers = list(self._breakers.values())
        return {breaker.name: breaker.state for breaker in breakers}

    def get_open(self) -> list[str]:
        """Get names of circuit breakers that are currently OPEN."""
        return [
            name
            for name, state in self.get_states().items()
            if state == CircuitState.OPEN
        ]
