"""
Retry Executor

Runs an operation with bounded attempts and exponential backoff plus jitter.

Responsibility:
    - Compute backoff delays (exponential, capped, jittered)
    - Run a callable up to max_retries + 1 times
    - Report attempts and recorded delays to the caller

Business Rules:
    - Delay for attempt n: min(base_delay_ms * 2^n, max_delay_ms)
    - Jitter: multiplicative, uniform in [1 - jitter_factor, 1 + jitter_factor]
    - Delay never negative, rounded to whole milliseconds
    - The error of the last attempt is the one reported on exhaustion

Architecture Notes:
    - Pure: no shared state, time and randomness are injectable
    - Synchronous (time.sleep), like the rest of the worker stack
"""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Final, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_BASE_DELAY_MS: Final[int] = 1000
DEFAULT_MAX_DELAY_MS: Final[int] = 30000
DEFAULT_JITTER_FACTOR: Final[float] = 0.1


@dataclass(frozen=True)
class RetryConfig:
    """
    Retry policy.

    Attributes:
        max_retries: Retries after the first attempt (total calls = max_retries + 1)
        base_delay_ms: Delay before the first retry, before jitter
        max_delay_ms: Upper bound for the exponential delay, before jitter
        jitter_factor: Relative jitter amplitude, 0 disables jitter

    Usage:
        config = RetryConfig(max_retries=5, base_delay_ms=500)
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    jitter_factor: float = DEFAULT_JITTER_FACTOR

    def __post_init__(self) -> None:
        """Reject values that would make the schedule meaningless."""
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError(
                f"Delays must be >= 0, got base={self.base_delay_ms}, max={self.max_delay_ms}"
            )
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError(f"jitter_factor must be in [0, 1], got {self.jitter_factor}")


DEFAULT_RETRY_CONFIG: Final[RetryConfig] = RetryConfig()


@dataclass
class RetryResult(Generic[T]):
    """
    Outcome of with_retry().

    Attributes:
        success: True if one attempt returned normally
        data: Return value of the successful attempt
        error: Exception of the last failed attempt (failure only)
        attempts: Number of calls made
        delays: Backoff delays (ms) recorded between attempts
    """

    success: bool
    attempts: int
    data: Optional[T] = None
    error: Optional[BaseException] = None
    delays: list[int] = field(default_factory=list)


def calculate_delay(
    attempt: int,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    rng: Callable[[], float] = random.random,
) -> int:
    """
    Calculate backoff delay in milliseconds for a zero-based attempt number.

    Args:
        attempt: Attempt that just failed (0 for the first call)
        config: Retry policy
        rng: Source of uniform floats in [0, 1), injectable for tests

    Returns:
        Delay in whole milliseconds, never negative

    Examples:
        >>> cfg = RetryConfig(base_delay_ms=1000, max_delay_ms=30000, jitter_factor=0)
        >>> [calculate_delay(n, cfg) for n in range(6)]
        [1000, 2000, 4000, 8000, 16000, 30000]
    """
    exponential_delay = config.base_delay_ms * (2**attempt)
    capped_delay = min(exponential_delay, config.max_delay_ms)

    jitter = capped_delay * config.jitter_factor * (rng() * 2 - 1)

    return max(0, round(capped_delay + jitter))


def with_retry(
    fn: Callable[[], T],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    sleep: Callable[[float], Any] = time.sleep,
    is_retryable: Optional[Callable[[Exception], bool]] = None,
    operation_name: str = "operation",
) -> RetryResult[T]:
    """
    Execute fn with retry logic and exponential backoff.

    Process Flow:
        1. Call fn (attempt 0)
        2. On success return immediately with attempts = attempt + 1
        3. On failure, if attempts remain: compute delay, record it, sleep, retry
        4. After max_retries + 1 failures return the last error

    Args:
        fn: Zero-argument callable to run
        config: Retry policy
        sleep: Called with the delay in seconds, injectable for tests
        is_retryable: Optional predicate; returning False stops retrying early
        operation_name: Label used in log messages

    Returns:
        RetryResult with success flag, data or last error, attempts and delays

    Examples:
        >>> result = with_retry(lambda: 42, RetryConfig(max_retries=2))
        >>> (result.success, result.data, result.attempts, result.delays)
        (True, 42, 1, [])
    """
    delays: list[int] = []
    last_error: Optional[Exception] = None

    for attempt in range(config.max_retries + 1):
        try:
            data = fn()
            return RetryResult(success=True, data=data, attempts=attempt + 1, delays=delays)
        except Exception as e:
            last_error = e

            if is_retryable is not None and not is_retryable(e):
                logger.warning(
                    f"{operation_name} failed with non-retryable error on attempt "
                    f"{attempt + 1}: {e}"
                )
                return RetryResult(
                    success=False, error=e, attempts=attempt + 1, delays=delays
                )

            if attempt < config.max_retries:
                delay = calculate_delay(attempt, config)
                delays.append(delay)
                logger.warning(
                    f"{operation_name} attempt {attempt + 1}/{config.max_retries + 1} failed, "
                    f"retrying in {delay}ms: {e}"
                )
                sleep(delay / 1000)

    logger.error(f"{operation_name} failed after {config.max_retries + 1} attempts: {last_error}")
    return RetryResult(
        success=False, error=last_error, attempts=config.max_retries + 1, delays=delays
    )
