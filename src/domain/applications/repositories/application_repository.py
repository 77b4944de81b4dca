"""
ApplicationRepository Interface

Repository pattern interface for Application persistence.
Defines the contract the Application Layer needs to track application status.

Responsibility:
    - Define data access contract (interface)
    - Enable Dependency Inversion (Domain defines, Infrastructure implements)
    - Support testing (easy to fake)

Architecture Notes:
    - Protocol-based interface (structural typing)
    - Implementation in Infrastructure layer (RedisApplicationRepository)
    - update_status() rejects a transition the state machine rejects, checked
      against the persisted status at write time (callers also validate
      through Application.transition_to() first)
"""

from typing import Optional, Protocol

from ..entities.application import Application


class ApplicationRepositoryProtocol(Protocol):
    """
    Protocol defining the contract for Application persistence.

    Usage:
        Repository is injected into AutoSenderService:

        >>> service = AutoSenderService(repository, queue)
        >>> app = service.get_application_by_id("abc-123")
    """

    def save(self, application: Application) -> None:
        """Store a new application (or overwrite all of its fields)."""
        ...

    def get_by_id(self, application_id: str) -> Optional[Application]:
        """Return the application or None when it does not exist."""
        ...

    def update_status(self, application: Application) -> None:
        """
        Persist status, confirmation_id, error_message, submitted_at and updated_at.

        The write is atomic with a check of the stored status: if the stored
        status cannot move to application.status, nothing is written.
        retry_count is not written here; it only changes through
        increment_retry_count().

        Raises:
            ApplicationNotFoundError: No record for application.id
            InvalidStatusTransitionError: Transition rejected by the state machine
        """
        ...

    def increment_retry_count(self, application_id: str) -> int:
        """Atomically add one to retry_count and return the new value."""
        ...

    def list_by_user(self, user_id: str) -> list[Application]:
        """All applications owned by user_id, newest first."""
        ...

    def list_by_batch(self, batch_id: str) -> list[Application]:
        """All applications created by one batch submission."""
        ...

    def mark_batch_notified(self, batch_id: str) -> bool:
        """
        Record that the batch completion notification was sent.

        Returns True only for the first caller, so concurrent workers
        notify once.
        """
        ...
