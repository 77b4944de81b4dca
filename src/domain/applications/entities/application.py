"""
Application Entity.

Core domain entity representing one job application submitted on behalf of a user.
This entity has identity (UUID string) and lifecycle (status transitions).

Unlike Value Objects, Entities are mutable and track their state over time.
Every status change goes through transition_to(), which consults the shared
transition table in src.domain.applications.status.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from src.domain.applications.status import (
    ApplicationStatus,
    is_terminal,
    is_valid_transition,
)
from src.domain.shared.exceptions import InvalidStatusTransitionError


@dataclass
class Application:
    """
    Mutable entity tracking a job application through its lifecycle.

    The entity follows the state machine:
    PENDING -> PROCESSING -> SUBMITTED | PENDING (retry) | FAILED
    PENDING -> CANCELLED, FAILED -> PENDING

    Attributes:
        user_id: Owner of the application
        job_id: Job posting identifier on the external job board
        resume_id: Resume used for the submission
        batch_id: Identifier shared by all applications queued together
        status: Current lifecycle status
        retry_count: Failed processing attempts so far (never decreases)
        cover_letter: Optional cover letter text
        submitted_at: Time the job board accepted the application
        confirmation_id: Confirmation returned by the job board
        error_message: Last failure reason shown to the user
        id: Unique identifier (UUID4 string, auto-generated)
        created_at: Entity creation timestamp
        updated_at: Last modification timestamp

    Examples:
        >>> app = Application(user_id="u1", job_id="j1", resume_id="r1", batch_id="b1")
        >>> app.status
        <ApplicationStatus.PENDING: 'pending'>
        >>> app.transition_to(ApplicationStatus.PROCESSING)
        >>> app.is_terminal()
        False
    """

    user_id: str
    job_id: str
    resume_id: str
    batch_id: str

    status: ApplicationStatus = ApplicationStatus.PENDING
    retry_count: int = 0

    cover_letter: Optional[str] = None
    submitted_at: Optional[datetime] = None
    confirmation_id: Optional[str] = None
    error_message: Optional[str] = None

    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        """Normalize status given as plain string (e.g. loaded from Redis)."""
        self.status = ApplicationStatus(self.status)

    def can_transition_to(self, new_status: ApplicationStatus) -> bool:
        """Check the transition table without mutating the entity."""
        return is_valid_transition(self.status, new_status)

    def transition_to(
        self,
        new_status: ApplicationStatus,
        confirmation_id: str | None = None,
        error_message: str | None = None,
        submitted_at: datetime | None = None,
    ) -> None:
        """
        Move the application to new_status.

        Optional fields are only written when given, so a retry keeps the
        previous error_message visible until a new one replaces it.
        Reaching SUBMITTED clears error_message.

        Args:
            new_status: Requested status
            confirmation_id: Job board confirmation (SUBMITTED)
            error_message: Failure reason (PENDING retry, FAILED)
            submitted_at: Acceptance time (SUBMITTED)

        Raises:
            InvalidStatusTransitionError: If the state machine rejects the change
        """
        new_status = ApplicationStatus(new_status)
        if not self.can_transition_to(new_status):
            raise InvalidStatusTransitionError(
                f"Invalid status transition from {self.status.value} to {new_status.value}",
                current_status=self.status.value,
                target_status=new_status.value,
            )

        self.status = new_status
        if new_status == ApplicationStatus.SUBMITTED:
            self.error_message = None
        if confirmation_id:
            self.confirmation_id = confirmation_id
        if error_message:
            self.error_message = error_message
        if submitted_at:
            self.submitted_at = submitted_at
        self.updated_at = datetime.now()

    def is_terminal(self) -> bool:
        """True once SUBMITTED or CANCELLED."""
        return is_terminal(self.status)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a flat dict of JSON-compatible values.

        None values are kept so that from_dict() round-trips; the Redis
        repository drops them before writing a hash.
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "job_id": self.job_id,
            "resume_id": self.resume_id,
            "batch_id": self.batch_id,
            "status": self.status.value,
            "retry_count": self.retry_count,
            "cover_letter": self.cover_letter,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "confirmation_id": self.confirmation_id,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Application":
        """
        Rebuild an entity from to_dict() output or a Redis hash.

        Redis hashes hold strings only, so retry_count and timestamps are
        converted back here. Missing optional fields become None.
        """

        def _parse_datetime(value: Any) -> Optional[datetime]:
            if not value:
                return None
            if isinstance(value, datetime):
                return value
            return datetime.fromisoformat(value)

        return cls(
            id=data["id"],
            user_id=data["user_id"],
            job_id=data["job_id"],
            resume_id=data["resume_id"],
            batch_id=data["batch_id"],
            status=ApplicationStatus(data.get("status", ApplicationStatus.PENDING.value)),
            retry_count=int(data.get("retry_count") or 0),
            cover_letter=data.get("cover_letter") or None,
            submitted_at=_parse_datetime(data.get("submitted_at")),
            confirmation_id=data.get("confirmation_id") or None,
            error_message=data.get("error_message") or None,
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            updated_at=_parse_datetime(data.get("updated_at")) or datetime.now(),
        )
