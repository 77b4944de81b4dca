"""
Shared Application Models

Responsibility:
    Contains shared models used across Application Layer.
    Prevents circular dependencies between the service, the worker and tasks.

Architecture Notes:
    - Part of Application Layer (Shared)
    - Used by AutoSenderService, ApplicationWorker and Celery tasks
    - Enums and common DTOs that don't belong to specific modules

Contains:
    - WorkerState: Lifecycle of an ApplicationWorker
    - ProcessOutcome / ProcessResult: What one worker cycle did
    - WorkerStatus: Snapshot returned by ApplicationWorker.get_status()
    - QueuedApplicationResponse / QueuedApplicationsResult: queue_applications() output
    - PaginatedApplications: get_applications() output

Does NOT contain:
    - Business logic (belongs to Domain Layer)
    - Infrastructure details (belongs to Infrastructure Layer)
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.applications.entities.application import Application
from src.domain.applications.status import ApplicationStatus


class WorkerState(str, Enum):
    """
    Lifecycle state of an ApplicationWorker.

    Attributes:
        STOPPED: No loop running (initial state, and after stop())
        RUNNING: Loop thread started and stop not requested
    """

    STOPPED = "stopped"
    RUNNING = "running"


class ProcessOutcome(str, Enum):
    """
    Result of one worker cycle.

    Attributes:
        IDLE: Nothing eligible in the scan window
        SUBMITTED: Application accepted by the job board
        REQUEUED: Failed attempt, application back in the worklist as PENDING
        FAILED: Application ended FAILED
        SKIPPED: Claim was stale (cancelled, missing or already moved on)
        ERROR: Cycle aborted by an infrastructure error; locks expire with their TTL
    """

    IDLE = "idle"
    SUBMITTED = "submitted"
    REQUEUED = "requeued"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


class ProcessResult(BaseModel):
    """
    Outcome of ApplicationWorker.run_once().

    Examples:
        >>> ProcessResult(outcome=ProcessOutcome.IDLE).model_dump(mode="json")
        {'outcome': 'idle', 'application_id': None, 'message': None}
    """

    outcome: ProcessOutcome
    application_id: Optional[str] = None
    message: Optional[str] = None


class WorkerStatus(BaseModel):
    """Snapshot of a worker and the shared worklist."""

    state: WorkerState
    queue_length: int = Field(ge=0)


# ============================================================================
# AUTO SENDER DTOs
# ============================================================================


class QueuedApplicationResponse(BaseModel):
    """One application created by queue_applications()."""

    id: str
    job_id: str
    status: ApplicationStatus
    queued_at: datetime

    @classmethod
    def from_application(cls, application: Application) -> "QueuedApplicationResponse":
        return cls(
            id=application.id,
            job_id=application.job_id,
            status=application.status,
            queued_at=application.created_at,
        )


class QueuedApplicationsResult(BaseModel):
    """
    Result of queue_applications().

    Attributes:
        batch_id: Id shared by every application created in this call
        applications: Created applications (duplicates are not listed)
        total_count: len(applications)
    """

    batch_id: str
    applications: list[QueuedApplicationResponse] = Field(default_factory=list)
    total_count: int = 0


@dataclass
class PaginatedApplications:
    """One page of a user's applications, newest first."""

    data: list[Application] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
