"""Retry policy configuration.

This module defines the bounded exponential backoff used between remote
attempts.
"""

import random
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for bounded retry with exponential backoff.

    Attributes:
        max_attempts: Total attempts per operation (first try included)
        base_delay_seconds: Delay before the second attempt
        max_delay_seconds: Cap applied to every computed delay
        multiplier: Exponential growth factor between delays
        jitter: Whether to randomize each delay within [delay/2, delay]

    Example:
        config = RetryConfig()
        config.delay_for_attempt(1)  # 0.2
        config.delay_for_attempt(2)  # 0.4
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.2
    max_delay_seconds: float = 2.0
    multiplier: float = 2.0
    jitter: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryConfig":
        """Build a config from ``RetrySettings``."""
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_seconds=settings.base_delay_seconds,
            max_delay_seconds=settings.max_delay_seconds,
            multiplier=settings.backoff_multiplier,
            jitter=settings.jitter,
        )

    def delay_for_attempt(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        if attempt < 1:
            raise ValueError("attempt must be at least 1")
        delay = min(
            self.base_delay_seconds * (self.multiplier ** (attempt - 1)),
            self.max_delay_seconds,
        )
        if self.jitter:
            delay = random.uniform(delay / 2, delay)
        return delay
