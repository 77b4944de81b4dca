"""
Application Worker - Submission Loop

Claims applications from the shared worklist and submits them to the job
board, one application per cycle.

Responsibility:
    - Poll the worklist on a fixed interval (daemon thread) or on demand (run_once)
    - Drive each claimed application through PROCESSING to its outcome
    - Compose circuit breaker -> retry executor -> gateway for the submission call
    - Decide requeue vs FAILED from the persisted retry counter
    - Send submitted / failed / batch complete notifications

Process Flow (one cycle):
    1. dequeue() -> nothing eligible ends the cycle
    2. PENDING -> PROCESSING (stale claim: log, release, stop)
    3. Fetch submission context (SubmissionContextError -> FAILED)
    4. Submit through breaker(retry(gateway))
    5. Success -> SUBMITTED with confirmation_id and submitted_at
    6. Retryable failure -> retry_count + 1, then PENDING + requeue or FAILED;
       job board rejection -> FAILED
    7. Release the claim exactly once (requeue releases it itself)

Architecture Notes:
    - One explicit instance per process with its own lifecycle state
    - stop() prevents the next cycle, never interrupts the running one
    - run_once() is serialized, so one process never runs two cycles at once
    - Nothing raises out of run_once(); status and error_message are the
      only user-visible channel
"""

import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Final, Optional

from redis import Redis
from redis.exceptions import RedisError

from src.application.config import SUBMISSION_CIRCUIT_NAME, WorkerSettings
from src.application.models import ProcessOutcome, ProcessResult, WorkerState, WorkerStatus
from src.application.services.auto_sender_service import AutoSenderService
from src.domain.applications.entities.application import Application
from src.domain.applications.services.ports import (
    Notification,
    NotificationType,
    NotifierProtocol,
    SubmissionContextProviderProtocol,
    SubmissionGatewayProtocol,
    SubmissionPayload,
    SubmissionResult,
    TransientSubmissionError,
)
from src.domain.applications.status import ApplicationStatus
from src.domain.applications.value_objects.queue_item import QueueItem
from src.domain.shared.exceptions import (
    ApplicationNotFoundError,
    InvalidStatusTransitionError,
    SubmissionContextError,
)
from src.infrastructure.job_board.http_gateway import HttpJobBoardGateway
from src.infrastructure.persistence.redis.application_queue import RedisApplicationQueue
from src.infrastructure.persistence.redis.notification_publisher import (
    RedisNotificationPublisher,
)
from src.infrastructure.persistence.repositories.application_repository import (
    RedisApplicationRepository,
)
from src.shared.utils.circuit_breaker import CircuitBreaker
from src.shared.utils.retry import with_retry

# Configure logger for this module
logger = logging.getLogger(__name__)

# Statuses after which no worker touches the application again on its own
_FINISHED_STATUSES: Final[frozenset[ApplicationStatus]] = frozenset(
    {ApplicationStatus.SUBMITTED, ApplicationStatus.FAILED, ApplicationStatus.CANCELLED}
)


class ApplicationWorker:
    """
    Submission worker.

    Examples:
        >>> worker = create_application_worker(context_provider)
        >>> worker.start()            # background polling
        >>> worker.get_status()
        WorkerStatus(state=<WorkerState.RUNNING: 'running'>, queue_length=3)
        >>> worker.stop()

        >>> worker.run_once()         # one cycle, e.g. from a Celery task
        ProcessResult(outcome=<ProcessOutcome.SUBMITTED: 'submitted'>, ...)
    """

    def __init__(
        self,
        queue: RedisApplicationQueue,
        service: AutoSenderService,
        context_provider: SubmissionContextProviderProtocol,
        gateway: SubmissionGatewayProtocol,
        notifier: NotifierProtocol,
        settings: Optional[WorkerSettings] = None,
        circuit_breaker: Optional[CircuitBreaker[SubmissionResult]] = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        """
        Initialize worker.

        Args:
            queue: Shared worklist and lock manager
            service: Application records (status changes, retry counter)
            context_provider: Resume bytes and applicant info per application
            gateway: Raw job board call
            notifier: Fire-and-forget notification sink
            settings: Tunables (default: WorkerSettings())
            circuit_breaker: Breaker for the job board (default: built from settings)
            sleep: Backoff sleep between submission attempts, injectable for tests
        """
        self.queue = queue
        self.service = service
        self.context_provider = context_provider
        self.gateway = gateway
        self.notifier = notifier
        self.settings = settings or WorkerSettings()
        self.max_retries = self.settings.max_retries
        self.retry_config = self.settings.retry_config()
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            SUBMISSION_CIRCUIT_NAME, self.settings.circuit_breaker_config()
        )
        self._sleep = sleep

        self._state = WorkerState.STOPPED
        self._state_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> WorkerState:
        return self._state

    def start(self) -> None:
        """Start polling on a daemon thread. No-op (with a warning) if already running."""
        with self._state_lock:
            if self._state == WorkerState.RUNNING:
                logger.warning("Application worker is already running")
                return

            self._stop_event.clear()
            self._state = WorkerState.RUNNING
            self._thread = threading.Thread(
                target=self._run_loop, name="application-worker", daemon=True
            )
            self._thread.start()

        logger.info(
            f"Application worker started (poll interval {self.settings.poll_interval_ms}ms)"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop polling.

        The cycle in progress, if any, runs to completion; this call waits
        up to timeout seconds for it.
        """
        with self._state_lock:
            if self._state == WorkerState.STOPPED:
                return

            self._stop_event.set()
            self._state = WorkerState.STOPPED
            thread = self._thread
            self._thread = None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

        logger.info("Application worker stopped")

    def get_status(self) -> WorkerStatus:
        return WorkerStatus(state=self._state, queue_length=self.queue.get_queue_length())

    def _run_loop(self) -> None:
        interval_seconds = self.settings.poll_interval_ms / 1000

        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(interval_seconds)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def run_once(self) -> ProcessResult:
        """
        Execute exactly one cycle.

        Returns:
            ProcessResult describing what happened; never raises
        """
        with self._cycle_lock:
            try:
                item = self.queue.dequeue()
            except RedisError as e:
                logger.error(f"Error in poll cycle: failed to dequeue: {e}")
                return ProcessResult(outcome=ProcessOutcome.ERROR, message=str(e))

            if item is None:
                return ProcessResult(outcome=ProcessOutcome.IDLE)

            try:
                return self.process_item(item)
            except Exception as e:
                logger.exception(f"Error in poll cycle for application {item.application_id}")
                return ProcessResult(
                    outcome=ProcessOutcome.ERROR,
                    application_id=item.application_id,
                    message=str(e),
                )

    def process_item(self, item: QueueItem) -> ProcessResult:
        """
        Process one claimed item and give the claim back.

        The claim is released exactly once: by requeue() when the item goes
        back to the worklist, by release_lock() otherwise.
        """
        logger.debug(f"Processing application {item.application_id}")

        result = ProcessResult(outcome=ProcessOutcome.ERROR, application_id=item.application_id)
        try:
            result = self._process(item)
            return result
        finally:
            if result.outcome == ProcessOutcome.REQUEUED:
                self.queue.requeue(item)
            else:
                self.queue.release_lock(item.application_id, item.user_id)

    def _process(self, item: QueueItem) -> ProcessResult:
        try:
            application = self.service.update_application_status(
                item.application_id, ApplicationStatus.PROCESSING
            )
        except (InvalidStatusTransitionError, ApplicationNotFoundError) as e:
            # Cancelled while queued, duplicate entry, or record gone
            logger.warning(f"Skipping application {item.application_id}: {e.message}")
            return ProcessResult(
                outcome=ProcessOutcome.SKIPPED,
                application_id=item.application_id,
                message=e.message,
            )

        try:
            context = self.context_provider.fetch_submission_context(application)
            payload = SubmissionPayload.from_context(context)
            submission = self._submit(application.job_id, payload)

            if submission.success:
                return self._mark_submitted(item, submission)

            if submission.retryable:
                return self._handle_retry(item, submission.error_message or "Submission failed")

            return self._mark_failed(
                item, submission.error_message or "Application rejected by job board"
            )

        except SubmissionContextError as e:
            return self._mark_failed(item, e.message)

        except Exception as e:
            logger.error(f"Error processing application {item.application_id}: {e}")
            return self._handle_retry(item, str(e))

    def _submit(self, job_id: str, payload: SubmissionPayload) -> SubmissionResult:
        """Circuit breaker around the retry executor around the raw gateway call."""

        def submit_with_retry() -> SubmissionResult:
            result = with_retry(
                lambda: self.gateway.submit_application(job_id, payload),
                self.retry_config,
                sleep=self._sleep,
                is_retryable=lambda e: isinstance(e, TransientSubmissionError),
                operation_name=f"Submission to job {job_id}",
            )
            if not result.success:
                assert result.error is not None
                raise result.error
            assert result.data is not None
            return result.data

        return self.circuit_breaker.execute(submit_with_retry)

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _mark_submitted(self, item: QueueItem, submission: SubmissionResult) -> ProcessResult:
        application = self.service.update_application_status(
            item.application_id,
            ApplicationStatus.SUBMITTED,
            confirmation_id=submission.confirmation_id,
            submitted_at=datetime.now(),
        )
        logger.info(f"Application {item.application_id} submitted successfully")

        self._send_notification(
            item.user_id,
            Notification(
                type=NotificationType.APPLICATION_SUBMITTED,
                title="Application Submitted",
                message="Your job application has been successfully submitted.",
                data={
                    "application_id": item.application_id,
                    "job_id": item.job_id,
                    "confirmation_id": submission.confirmation_id,
                },
            ),
        )
        self._maybe_notify_batch_complete(application)

        return ProcessResult(
            outcome=ProcessOutcome.SUBMITTED,
            application_id=item.application_id,
            message=submission.confirmation_id,
        )

    def _mark_failed(self, item: QueueItem, error_message: str) -> ProcessResult:
        application = self.service.update_application_status(
            item.application_id, ApplicationStatus.FAILED, error_message=error_message
        )
        logger.warning(f"Application {item.application_id} failed: {error_message}")

        self._notify_failure(item, error_message)
        self._maybe_notify_batch_complete(application)

        return ProcessResult(
            outcome=ProcessOutcome.FAILED,
            application_id=item.application_id,
            message=error_message,
        )

    def _handle_retry(self, item: QueueItem, error_message: str) -> ProcessResult:
        """
        Count the failed attempt and decide between another attempt and FAILED.

        The item itself is put back by process_item() once this returns REQUEUED.
        """
        retry_count = self.service.increment_retry_count(item.application_id)

        if retry_count < self.max_retries:
            self.service.update_application_status(
                item.application_id, ApplicationStatus.PENDING, error_message=error_message
            )
            logger.info(
                f"Application {item.application_id} requeued for retry "
                f"({retry_count}/{self.max_retries})"
            )
            return ProcessResult(
                outcome=ProcessOutcome.REQUEUED,
                application_id=item.application_id,
                message=error_message,
            )

        final_error_message = f"Max retries exceeded. Last error: {error_message}"
        application = self.service.update_application_status(
            item.application_id, ApplicationStatus.FAILED, error_message=final_error_message
        )
        logger.warning(
            f"Application {item.application_id} failed after {retry_count} attempts"
        )

        self._notify_failure(item, final_error_message)
        self._maybe_notify_batch_complete(application)

        return ProcessResult(
            outcome=ProcessOutcome.FAILED,
            application_id=item.application_id,
            message=final_error_message,
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notify_failure(self, item: QueueItem, error_message: str) -> None:
        self._send_notification(
            item.user_id,
            Notification(
                type=NotificationType.APPLICATION_FAILED,
                title="Application Failed",
                message=error_message or "Your job application could not be submitted.",
                data={
                    "application_id": item.application_id,
                    "job_id": item.job_id,
                    "error_message": error_message,
                },
            ),
        )

    def _maybe_notify_batch_complete(self, application: Application) -> None:
        """Send BATCH_COMPLETE once, when every application of the batch is finished."""
        try:
            batch = self.service.get_applications_by_batch(
                application.user_id, application.batch_id
            )
            if not batch or any(app.status not in _FINISHED_STATUSES for app in batch):
                return

            if not self.service.mark_batch_notified(application.batch_id):
                return

        except RedisError as e:
            logger.error(f"Failed to check batch {application.batch_id} completion: {e}")
            return

        stats = {
            "total": len(batch),
            "submitted": sum(1 for app in batch if app.status == ApplicationStatus.SUBMITTED),
            "failed": sum(1 for app in batch if app.status == ApplicationStatus.FAILED),
            "cancelled": sum(1 for app in batch if app.status == ApplicationStatus.CANCELLED),
        }

        self._send_notification(
            application.user_id,
            Notification(
                type=NotificationType.BATCH_COMPLETE,
                title="Batch Applications Complete",
                message=(
                    f"Batch processing complete: {stats['submitted']} submitted, "
                    f"{stats['failed']} failed out of {stats['total']} applications."
                ),
                data={"batch_id": application.batch_id, **stats},
            ),
        )

    def _send_notification(self, user_id: str, notification: Notification) -> None:
        try:
            self.notifier.send_notification(user_id, notification)
        except Exception as e:
            logger.error(f"Failed to send {notification.type.value} notification: {e}")


def create_application_worker(
    context_provider: SubmissionContextProviderProtocol,
    settings: Optional[WorkerSettings] = None,
    client: Optional[Redis] = None,
) -> ApplicationWorker:
    """
    Wire a worker with the Redis and HTTP implementations.

    Args:
        context_provider: Resume and profile reader supplied by the host service
        settings: Tunables (default: WorkerSettings.from_env())
        client: Redis client (default: shared pooled client)
    """
    settings = settings or WorkerSettings.from_env()

    queue = RedisApplicationQueue(
        client=client,
        lock_ttl_seconds=settings.lock_ttl_seconds,
        scan_window=settings.scan_window,
    )
    service = AutoSenderService(RedisApplicationRepository(client=queue.client), queue)

    return ApplicationWorker(
        queue=queue,
        service=service,
        context_provider=context_provider,
        gateway=HttpJobBoardGateway(
            base_url=settings.job_board_api_url,
            api_key=settings.job_board_api_key,
            timeout=settings.job_board_timeout_seconds,
        ),
        notifier=RedisNotificationPublisher(client=queue.client),
        settings=settings,
    )
