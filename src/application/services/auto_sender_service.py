"""
Auto Sender Service - Application Orchestration

Responsibility:
    Owns the application records of the automated submission flow:
    creates them, queues them, reads them and moves them through the
    status state machine.

Architecture Notes:
    - Part of Application Layer (Services/Use Cases)
    - Depends on Domain Layer (ApplicationRepositoryProtocol, Application entity)
    - Depends on RedisApplicationQueue for the submission worklist
    - Every status change goes through Application.transition_to() and then
      the repository's compare-and-set write, so an illegal transition is
      rejected even when the stored status changed after the read

Contains:
    - AutoSenderService: Main orchestration class

Does NOT contain:
    - Submission logic (ApplicationWorker)
    - HTTP handling (out of scope)
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from src.application.commands.queue_applications import QueueApplicationsCommand
from src.application.models import (
    PaginatedApplications,
    QueuedApplicationResponse,
    QueuedApplicationsResult,
)
from src.domain.applications.entities.application import Application
from src.domain.applications.repositories.application_repository import (
    ApplicationRepositoryProtocol,
)
from src.domain.applications.status import ApplicationStatus
from src.domain.applications.value_objects.queue_item import QueueItem
from src.domain.shared.exceptions import (
    ApplicationNotFoundError,
    InvalidStatusTransitionError,
)
from src.infrastructure.persistence.redis.application_queue import RedisApplicationQueue

# Configure logger for this module
logger = logging.getLogger(__name__)

# Statuses that allow a new application for the same job
_REAPPLY_ALLOWED_STATUSES = frozenset({ApplicationStatus.FAILED, ApplicationStatus.CANCELLED})


class AutoSenderService:
    """
    Application records and the submission worklist.

    Examples:
        >>> service = AutoSenderService(RedisApplicationRepository(), RedisApplicationQueue())
        >>> result = service.queue_applications(
        ...     "user-1", QueueApplicationsCommand(resume_id="r1", job_ids=["j1", "j2"])
        ... )
        >>> result.total_count
        2
    """

    def __init__(
        self,
        repository: ApplicationRepositoryProtocol,
        queue: RedisApplicationQueue,
    ) -> None:
        self.repository = repository
        self.queue = queue

    # ------------------------------------------------------------------
    # Producer
    # ------------------------------------------------------------------

    def queue_applications(
        self, user_id: str, command: QueueApplicationsCommand
    ) -> QueuedApplicationsResult:
        """
        Create one PENDING application per job and append them to the worklist.

        Jobs that already have an application for this user in any status
        other than FAILED or CANCELLED are skipped with a warning.

        Raises:
            InvalidQueueApplicationsCommandError: Command violates business rules
        """
        command.validate_business_rules()

        batch_id = str(uuid4())
        active_job_ids = {
            app.job_id
            for app in self.repository.list_by_user(user_id)
            if app.status not in _REAPPLY_ALLOWED_STATUSES
        }

        applications: list[Application] = []
        queue_items: list[QueueItem] = []

        for job_id in command.unique_job_ids():
            if job_id in active_job_ids:
                logger.warning(f"Application already exists for user {user_id} and job {job_id}")
                continue

            application = Application(
                user_id=user_id,
                job_id=job_id,
                resume_id=command.resume_id,
                batch_id=batch_id,
                cover_letter=command.cover_letter,
            )
            self.repository.save(application)
            applications.append(application)

            queue_items.append(
                QueueItem(
                    application_id=application.id,
                    user_id=user_id,
                    job_id=job_id,
                    resume_id=command.resume_id,
                )
            )

        self.queue.enqueue_batch(queue_items)

        logger.info(f"Queued {len(applications)} applications in batch {batch_id}")

        return QueuedApplicationsResult(
            batch_id=batch_id,
            applications=[QueuedApplicationResponse.from_application(app) for app in applications],
            total_count=len(applications),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_application_status(self, user_id: str, application_id: str) -> Application:
        """
        Get an application owned by user_id.

        Raises:
            ApplicationNotFoundError: Missing, or owned by another user
        """
        application = self.repository.get_by_id(application_id)
        if application is None or application.user_id != user_id:
            raise ApplicationNotFoundError(
                f"Application {application_id} not found", application_id=application_id
            )
        return application

    def get_applications(
        self,
        user_id: str,
        status: Optional[ApplicationStatus] = None,
        job_id: Optional[str] = None,
        batch_id: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = 20,
    ) -> PaginatedApplications:
        """
        Page through a user's applications, newest first.

        Args:
            status, job_id, batch_id: Exact-match filters (optional)
            from_date, to_date: Inclusive bounds on created_at (optional)
            page: 1-based page number
            limit: Page size

        Raises:
            ValueError: page or limit below 1
        """
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        applications = self.repository.list_by_user(user_id)

        if status is not None:
            wanted = ApplicationStatus(status)
            applications = [app for app in applications if app.status == wanted]
        if job_id is not None:
            applications = [app for app in applications if app.job_id == job_id]
        if batch_id is not None:
            applications = [app for app in applications if app.batch_id == batch_id]
        if from_date is not None:
            applications = [app for app in applications if app.created_at >= from_date]
        if to_date is not None:
            applications = [app for app in applications if app.created_at <= to_date]

        skip = (page - 1) * limit
        return PaginatedApplications(
            data=applications[skip : skip + limit],
            total=len(applications),
            page=page,
            limit=limit,
        )

    def get_applications_by_batch(self, user_id: str, batch_id: str) -> list[Application]:
        return [app for app in self.repository.list_by_batch(batch_id) if app.user_id == user_id]

    def get_application_by_id(self, application_id: str) -> Optional[Application]:
        """Internal lookup without ownership check."""
        return self.repository.get_by_id(application_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def cancel_application(self, user_id: str, application_id: str) -> Application:
        """
        Cancel a PENDING application and withdraw it from the worklist.

        Raises:
            ApplicationNotFoundError: Missing, or owned by another user
            InvalidStatusTransitionError: Application is no longer PENDING
        """
        application = self.get_application_status(user_id, application_id)

        if not application.can_transition_to(ApplicationStatus.CANCELLED):
            raise InvalidStatusTransitionError(
                f"Cannot cancel application in {application.status.value} status",
                current_status=application.status.value,
                target_status=ApplicationStatus.CANCELLED.value,
            )

        application.transition_to(ApplicationStatus.CANCELLED)
        try:
            self.repository.update_status(application)
        except InvalidStatusTransitionError as e:
            # Claimed by a worker after our read
            raise InvalidStatusTransitionError(
                f"Cannot cancel application in {e.current_status} status",
                current_status=e.current_status,
                target_status=ApplicationStatus.CANCELLED.value,
            ) from e

        # A worker that claimed the item meanwhile finds it CANCELLED and skips it
        self.queue.remove_from_queue(application_id)

        logger.info(f"Cancelled application {application_id}")
        return application

    def update_application_status(
        self,
        application_id: str,
        new_status: ApplicationStatus,
        confirmation_id: Optional[str] = None,
        error_message: Optional[str] = None,
        submitted_at: Optional[datetime] = None,
    ) -> Application:
        """
        Move an application to new_status after validating the transition.

        The transition is checked twice: on the loaded copy, and by the
        repository against the stored status at write time, so a concurrent
        change made after the read (e.g. a cancellation) is never overwritten.

        Raises:
            ApplicationNotFoundError: Application does not exist
            InvalidStatusTransitionError: Transition not allowed; nothing is written
        """
        application = self.repository.get_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundError(
                f"Application {application_id} not found", application_id=application_id
            )

        application.transition_to(
            new_status,
            confirmation_id=confirmation_id,
            error_message=error_message,
            submitted_at=submitted_at,
        )
        self.repository.update_status(application)

        logger.debug(f"Updated application {application_id} status to {application.status.value}")
        return application

    def mark_batch_notified(self, batch_id: str) -> bool:
        """True for exactly one caller per batch (completion notification guard)."""
        return self.repository.mark_batch_notified(batch_id)

    def increment_retry_count(self, application_id: str) -> int:
        """
        Atomically increment retry_count.

        Raises:
            ApplicationNotFoundError: Application does not exist
        """
        if self.repository.get_by_id(application_id) is None:
            raise ApplicationNotFoundError(
                f"Application {application_id} not found", application_id=application_id
            )
        return self.repository.increment_retry_count(application_id)
