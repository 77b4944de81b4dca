"""
Circuit Breaker

Failure-isolation state machine that stops calling an unhealthy dependency
for a cooldown period and tries it again before resuming normal traffic.

State transitions:
    CLOSED ──(failure_threshold failures within failure_window_ms)──> OPEN
    OPEN ──(open_duration_ms elapsed, on next call)──> HALF_OPEN
    HALF_OPEN ──(trial call succeeds)──> CLOSED (failure history cleared)
    HALF_OPEN ──(trial call fails or trial budget exhausted)──> OPEN

Architecture Notes:
    - State is private to the instance (and therefore to the process).
      Workers running in several processes each keep their own view of
      downstream health.
    - Rejections raise CircuitOpenError unless a fallback callable is
      configured. Submission paths must not configure one.
    - Clock is injectable (seconds, monotonic) so tests never sleep.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FAILURE_THRESHOLD: Final[int] = 5
DEFAULT_FAILURE_WINDOW_MS: Final[int] = 60000
DEFAULT_OPEN_DURATION_MS: Final[int] = 30000
DEFAULT_HALF_OPEN_MAX_ATTEMPTS: Final[int] = 1


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """
    Circuit breaker thresholds.

    Attributes:
        failure_threshold: Failures within the window that open the circuit
        failure_window_ms: Sliding window for counting failures
        open_duration_ms: Time the circuit stays OPEN before probing
        half_open_max_attempts: Trial calls allowed while HALF_OPEN
    """

    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    failure_window_ms: int = DEFAULT_FAILURE_WINDOW_MS
    open_duration_ms: int = DEFAULT_OPEN_DURATION_MS
    half_open_max_attempts: int = DEFAULT_HALF_OPEN_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError(f"failure_threshold must be >= 1, got {self.failure_threshold}")
        if self.half_open_max_attempts < 1:
            raise ValueError(
                f"half_open_max_attempts must be >= 1, got {self.half_open_max_attempts}"
            )
        if self.failure_window_ms < 0 or self.open_duration_ms < 0:
            raise ValueError("failure_window_ms and open_duration_ms must be >= 0")


class CircuitOpenError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, circuit_name: str) -> None:
        self.circuit_name = circuit_name
        super().__init__(f"Circuit breaker '{circuit_name}' is open")


class CircuitBreaker(Generic[T]):
    """
    Wraps calls to one downstream dependency.

    Usage:
        >>> breaker = CircuitBreaker("job-board-submission", CircuitBreakerConfig())
        >>> result = breaker.execute(lambda: gateway.submit_application(job_id, payload))

        >>> # Read-style caller with stale data as fallback
        >>> jobs_breaker = CircuitBreaker("job-board-jobs", fallback=lambda: cached_jobs)

    Attributes:
        name: Label used in logs and CircuitOpenError
        config: Thresholds
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        fallback: Optional[Callable[[], T]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._fallback = fallback
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failures: list[float] = []
        self._last_state_change_ms = self._now_ms()
        self._half_open_attempts = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    def execute(self, fn: Callable[[], T]) -> T:
        """
        Run fn through the breaker.

        Args:
            fn: Zero-argument callable performing the downstream call

        Returns:
            fn's result, or the fallback's result when the call is rejected

        Raises:
            CircuitOpenError: Call rejected and no fallback configured
            Exception: Whatever fn raised (after being recorded as a failure)
        """
        self._cleanup_old_failures()

        if self._state == CircuitState.OPEN:
            if self._should_transition_to_half_open():
                self._transition_to(CircuitState.HALF_OPEN)
            else:
                logger.warning(f"Circuit '{self.name}' is OPEN, rejecting request")
                return self._handle_open_circuit()

        if self._state == CircuitState.HALF_OPEN:
            if self._half_open_attempts >= self.config.half_open_max_attempts:
                logger.warning(
                    f"Circuit '{self.name}' half-open attempts exhausted, reopening"
                )
                self._transition_to(CircuitState.OPEN)
                return self._handle_open_circuit()
            self._half_open_attempts += 1

        try:
            result = fn()
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def get_failure_count(self) -> int:
        """Failures currently inside the sliding window."""
        self._cleanup_old_failures()
        return len(self._failures)

    def reset(self) -> None:
        """Force the breaker back to a fresh CLOSED state."""
        self._state = CircuitState.CLOSED
        self._failures = []
        self._last_state_change_ms = self._now_ms()
        self._half_open_attempts = 0

    def _on_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            logger.info(f"Circuit '{self.name}' trial call succeeded, closing circuit")
            self._transition_to(CircuitState.CLOSED)

    def _on_failure(self) -> None:
        self._failures.append(self._now_ms())

        if self._state == CircuitState.HALF_OPEN:
            logger.warning(f"Circuit '{self.name}' trial call failed, reopening circuit")
            self._transition_to(CircuitState.OPEN)
            return

        if len(self._failures) >= self.config.failure_threshold:
            logger.warning(
                f"Circuit '{self.name}' failure threshold "
                f"({self.config.failure_threshold}) reached, opening circuit"
            )
            self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        logger.info(
            f"Circuit '{self.name}' transitioning from {self._state.value} to {new_state.value}"
        )
        self._state = new_state
        self._last_state_change_ms = self._now_ms()

        if new_state == CircuitState.CLOSED:
            self._failures = []
            self._half_open_attempts = 0
        elif new_state == CircuitState.HALF_OPEN:
            self._half_open_attempts = 0

    def _should_transition_to_half_open(self) -> bool:
        return self._now_ms() - self._last_state_change_ms >= self.config.open_duration_ms

    def _cleanup_old_failures(self) -> None:
        cutoff = self._now_ms() - self.config.failure_window_ms
        self._failures = [ts for ts in self._failures if ts > cutoff]

    def _handle_open_circuit(self) -> T:
        if self._fallback is not None:
            logger.info(f"Circuit '{self.name}' using fallback")
            return self._fallback()
        raise CircuitOpenError(self.name)

    def _now_ms(self) -> float:
        return self._clock() * 1000
