"""
Submission Ports

Protocols for the external collaborators the worker loop consumes, and the
small DTOs that cross those boundaries.

Responsibility:
    - SubmissionContextProviderProtocol: fetch resume bytes and applicant info
    - SubmissionGatewayProtocol: submit an application to the job board
    - NotifierProtocol: fire-and-forget user notifications

Architecture Notes:
    - Domain defines, Infrastructure (or the enclosing service) implements
    - Profile, resume and file storage management are out of scope here;
      only the narrow read needed for a submission is specified
    - Error contract:
        * SubmissionContextError (domain) -> permanent, no retry
        * TransientSubmissionError -> retried and counted by the circuit breaker
        * SubmissionResult(retryable=False) -> job board rejected the request
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

from ..entities.application import Application


class TransientSubmissionError(Exception):
    """
    Raised by a gateway for failures worth retrying.

    Network errors, timeouts, 5xx, 408 and 429 responses.

    Attributes:
        status_code: HTTP status code when the failure came from a response
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class ApplicantInfo:
    """Applicant contact details sent with every submission."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class SubmissionContext:
    """
    Everything fetched from collaborators before a submission.

    Attributes:
        resume_bytes: Resume file content (PDF)
        applicant_info: Contact details from the user's profile
        cover_letter: Optional cover letter text
    """

    resume_bytes: bytes
    applicant_info: ApplicantInfo
    cover_letter: Optional[str] = None


@dataclass(frozen=True)
class SubmissionPayload:
    """Request body for SubmissionGatewayProtocol.submit_application()."""

    resume_file: bytes
    applicant_info: ApplicantInfo
    cover_letter: Optional[str] = None

    @classmethod
    def from_context(cls, context: SubmissionContext) -> "SubmissionPayload":
        return cls(
            resume_file=context.resume_bytes,
            applicant_info=context.applicant_info,
            cover_letter=context.cover_letter,
        )


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of one submission call.

    Attributes:
        success: True if the job board accepted the application
        confirmation_id: Job board confirmation (success only)
        error_message: Failure reason (failure only)
        retryable: False when the job board rejected the request itself
    """

    success: bool
    confirmation_id: Optional[str] = None
    error_message: Optional[str] = None
    retryable: bool = True


class NotificationType(str, Enum):
    """Kinds of notifications sent by the worker."""

    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_FAILED = "application_failed"
    BATCH_COMPLETE = "batch_complete"


@dataclass(frozen=True)
class Notification:
    """
    Notification handed to NotifierProtocol.

    Content delivery (channels, templates) belongs to the notifier.
    """

    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "data": self.data,
        }


class SubmissionContextProviderProtocol(Protocol):
    """Reads resume and profile data for one application."""

    def fetch_submission_context(self, application: Application) -> SubmissionContext:
        """
        Raises:
            SubmissionContextError: Resume, profile or resume file is missing
        """
        ...


class SubmissionGatewayProtocol(Protocol):
    """Raw call to the external job board (no retry, no circuit breaker)."""

    def submit_application(self, job_id: str, payload: SubmissionPayload) -> SubmissionResult:
        """
        Raises:
            TransientSubmissionError: Failure worth retrying
        """
        ...


class NotifierProtocol(Protocol):
    """Fire-and-forget notification sink."""

    def send_notification(self, user_id: str, notification: Notification) -> None:
        ...
