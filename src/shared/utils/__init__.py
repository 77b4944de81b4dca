"""
Shared Utilities

Responsibility:
    Generic resilience helpers used across the application.

Contains:
    - Retry executor: exponential backoff with jitter (retry.py)
    - Circuit breaker: failure-window state machine (circuit_breaker.py)

Does NOT contain:
    - Domain-specific utilities (use Domain layer)
    - Infrastructure utilities (use Infrastructure layer)
"""

from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitOpenError,
    CircuitState,
)
from .retry import (
    DEFAULT_RETRY_CONFIG,
    RetryConfig,
    RetryResult,
    calculate_delay,
    with_retry,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitOpenError",
    "CircuitState",
    "DEFAULT_RETRY_CONFIG",
    "RetryConfig",
    "RetryResult",
    "calculate_delay",
    "with_retry",
]
