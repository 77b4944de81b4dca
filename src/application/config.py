"""
Worker Configuration

Tunables for the submission worker, the retry executor and the circuit
breaker guarding the job board.

Design Principles:
    - Module-level defaults as typed constants
    - Frozen dataclass validated on construction
    - Environment overrides read once in WorkerSettings.from_env()
    - Defaults are a starting point, not a production recommendation
"""

import os
from dataclasses import dataclass
from typing import Final

from dotenv import load_dotenv

from src.infrastructure.job_board.http_gateway import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from src.infrastructure.persistence.redis.application_queue import (
    DEFAULT_LOCK_TTL_SECONDS,
    DEFAULT_SCAN_WINDOW,
)
from src.shared.utils.circuit_breaker import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_FAILURE_WINDOW_MS,
    DEFAULT_HALF_OPEN_MAX_ATTEMPTS,
    DEFAULT_OPEN_DURATION_MS,
    CircuitBreakerConfig,
)
from src.shared.utils.retry import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    RetryConfig,
)


# ============================================================================
# WORKER DEFAULTS
# ============================================================================

DEFAULT_APPLICATION_MAX_RETRIES: Final[int] = 3  # processing attempts per application
DEFAULT_POLL_INTERVAL_MS: Final[int] = 5000

SUBMISSION_CIRCUIT_NAME: Final[str] = "job-board-submission"


@dataclass(frozen=True)
class WorkerSettings:
    """
    Settings for ApplicationWorker and its collaborators.

    Attributes:
        max_retries: Processing attempts before an application is FAILED
        poll_interval_ms: Pause between worker cycles
        lock_ttl_seconds: Lease duration of item and user locks
        scan_window: Head entries inspected per dequeue
        submission_*: Retry policy of one submission (per attempt)
        cb_*: Circuit breaker thresholds for the job board
        job_board_*: HTTP gateway settings
    """

    max_retries: int = DEFAULT_APPLICATION_MAX_RETRIES
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    lock_ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS
    scan_window: int = DEFAULT_SCAN_WINDOW

    submission_max_retries: int = DEFAULT_MAX_RETRIES
    submission_base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    submission_max_delay_ms: int = DEFAULT_MAX_DELAY_MS
    submission_jitter_factor: float = DEFAULT_JITTER_FACTOR

    cb_failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    cb_failure_window_ms: int = DEFAULT_FAILURE_WINDOW_MS
    cb_open_duration_ms: int = DEFAULT_OPEN_DURATION_MS
    cb_half_open_max_attempts: int = DEFAULT_HALF_OPEN_MAX_ATTEMPTS

    job_board_api_url: str = DEFAULT_BASE_URL
    job_board_api_key: str = ""
    job_board_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.poll_interval_ms < 0:
            raise ValueError(f"poll_interval_ms must be >= 0, got {self.poll_interval_ms}")
        if self.lock_ttl_seconds < 1:
            raise ValueError(f"lock_ttl_seconds must be >= 1, got {self.lock_ttl_seconds}")
        if self.scan_window < 1:
            raise ValueError(f"scan_window must be >= 1, got {self.scan_window}")
        if self.job_board_timeout_seconds <= 0:
            raise ValueError(
                f"job_board_timeout_seconds must be > 0, got {self.job_board_timeout_seconds}"
            )

        # Fail at startup, not at the first submission
        self.retry_config()
        self.circuit_breaker_config()

    @classmethod
    def from_env(cls) -> "WorkerSettings":
        """Build settings from environment variables (.env is loaded first)."""
        load_dotenv()

        return cls(
            max_retries=int(
                os.getenv("APPLICATION_MAX_RETRIES", str(DEFAULT_APPLICATION_MAX_RETRIES))
            ),
            poll_interval_ms=int(
                os.getenv("APPLICATION_POLL_INTERVAL_MS", str(DEFAULT_POLL_INTERVAL_MS))
            ),
            lock_ttl_seconds=int(
                os.getenv("APPLICATION_LOCK_TTL_SECONDS", str(DEFAULT_LOCK_TTL_SECONDS))
            ),
            scan_window=int(os.getenv("APPLICATION_QUEUE_SCAN_WINDOW", str(DEFAULT_SCAN_WINDOW))),
            submission_max_retries=int(
                os.getenv("SUBMISSION_MAX_RETRIES", str(DEFAULT_MAX_RETRIES))
            ),
            submission_base_delay_ms=int(
                os.getenv("SUBMISSION_BASE_DELAY_MS", str(DEFAULT_BASE_DELAY_MS))
            ),
            submission_max_delay_ms=int(
                os.getenv("SUBMISSION_MAX_DELAY_MS", str(DEFAULT_MAX_DELAY_MS))
            ),
            submission_jitter_factor=float(
                os.getenv("SUBMISSION_JITTER_FACTOR", str(DEFAULT_JITTER_FACTOR))
            ),
            cb_failure_threshold=int(
                os.getenv("SUBMISSION_CB_FAILURE_THRESHOLD", str(DEFAULT_FAILURE_THRESHOLD))
            ),
            cb_failure_window_ms=int(
                os.getenv("SUBMISSION_CB_FAILURE_WINDOW_MS", str(DEFAULT_FAILURE_WINDOW_MS))
            ),
            cb_open_duration_ms=int(
                os.getenv("SUBMISSION_CB_OPEN_DURATION_MS", str(DEFAULT_OPEN_DURATION_MS))
            ),
            cb_half_open_max_attempts=int(
                os.getenv(
                    "SUBMISSION_CB_HALF_OPEN_MAX_ATTEMPTS", str(DEFAULT_HALF_OPEN_MAX_ATTEMPTS)
                )
            ),
            job_board_api_url=os.getenv("JOB_BOARD_API_URL", DEFAULT_BASE_URL),
            job_board_api_key=os.getenv("JOB_BOARD_API_KEY", ""),
            job_board_timeout_seconds=float(
                os.getenv("JOB_BOARD_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
            ),
        )

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.submission_max_retries,
            base_delay_ms=self.submission_base_delay_ms,
            max_delay_ms=self.submission_max_delay_ms,
            jitter_factor=self.submission_jitter_factor,
        )

    def circuit_breaker_config(self) -> CircuitBreakerConfig:
        return CircuitBreakerConfig(
            failure_threshold=self.cb_failure_threshold,
            failure_window_ms=self.cb_failure_window_ms,
            open_duration_ms=self.cb_open_duration_ms,
            half_open_max_attempts=self.cb_half_open_max_attempts,
        )

    def to_dict(self) -> dict[str, object]:
        """Settings for startup logging (API key masked)."""
        data = dict(self.__dict__)
        data["job_board_api_key"] = "***" if self.job_board_api_key else ""
        return data
