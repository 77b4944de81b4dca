"""
Domain Layer Exceptions

This module defines the exception hierarchy for the Domain Layer.
All domain-specific exceptions inherit from DomainException.

Responsibility:
    - Base exception class for domain errors
    - Type-safe error handling across layers
    - Clear separation from framework exceptions (Redis, httpx, Celery)

Architecture Notes:
    - Part of Shared Domain (used across all subdomains)
    - Infrastructure Layer raises its own exceptions (RedisError, httpx.HTTPError)
    - Application Layer catches DomainException to turn business rule
      violations into status transitions and log entries
"""


class DomainException(Exception):
    """
    Base exception for all domain layer errors.

    This exception serves as the root of the domain exception hierarchy.
    All domain-specific exceptions should inherit from this class to enable
    type-safe error handling in the Application Layer.

    Usage:
        - Catch this in Application Layer to handle all domain errors
        - Infrastructure Layer should not raise DomainException (use own exceptions)

    Examples:
        >>> raise DomainException("Business rule violation")

        >>> try:
        ...     # domain operation
        ... except DomainException as e:
        ...     logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str) -> None:
        """
        Initialize domain exception with error message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}: {self.message}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class InvalidStatusTransitionError(DomainException):
    """
    Raised when an application status change is not allowed by the state machine.

    This is a caller error, never a transient condition: retrying the same
    transition will fail the same way.

    This exception is raised when:
    - Transition leaves a terminal status (SUBMITTED, CANCELLED)
    - Transition skips a step (e.g. PENDING -> FAILED)
    - Transition targets the current status (self-transitions are illegal)
    - A worker claims an item whose persisted status is no longer PENDING

    Attributes:
        current_status: Status the application is in
        target_status: Status that was requested

    Examples:
        >>> raise InvalidStatusTransitionError(
        ...     "Invalid status transition from submitted to pending",
        ...     current_status="submitted",
        ...     target_status="pending",
        ... )
    """

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        target_status: str | None = None,
    ) -> None:
        """
        Initialize status transition error.

        Args:
            message: Error description
            current_status: Status before the rejected transition (optional)
            target_status: Requested status (optional)
        """
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message)


class ApplicationNotFoundError(DomainException):
    """
    Raised when an application does not exist or does not belong to the caller.

    Ownership mismatches are reported the same way as missing records so that
    callers cannot discover other users' application ids.

    Examples:
        >>> raise ApplicationNotFoundError("Application abc-123 not found", application_id="abc-123")
    """

    def __init__(self, message: str, application_id: str | None = None) -> None:
        """
        Initialize not found error.

        Args:
            message: Error description
            application_id: Id that was looked up (optional)
        """
        self.application_id = application_id
        super().__init__(message)


class InvalidQueueApplicationsCommandError(DomainException):
    """
    Raised when a batch submission request violates business rules.

    Collects every validation error so the caller gets the whole list at once.

    Attributes:
        errors: List of validation error messages

    Examples:
        >>> raise InvalidQueueApplicationsCommandError(
        ...     "Invalid batch", errors=["job_ids must not be empty"]
        ... )
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        """
        Initialize command validation error.

        Args:
            message: Primary error message
            errors: Optional list of specific validation errors
        """
        self.errors = errors or []
        if self.errors:
            detailed_message = f"{message}:\n" + "\n".join(f"  - {err}" for err in self.errors)
            super().__init__(detailed_message)
        else:
            super().__init__(message)

    def has_errors(self) -> bool:
        """Check if any validation errors exist."""
        return len(self.errors) > 0


class SubmissionContextError(DomainException):
    """
    Raised when the data needed to submit an application cannot be gathered.

    These are data-integrity errors (missing resume, missing profile, resume
    file unavailable in storage), so they are permanent: the worker moves the
    application straight to FAILED without retrying.

    Attributes:
        application_id: Application whose context was requested (optional)

    Examples:
        >>> raise SubmissionContextError("Resume not found", application_id="abc-123")
        >>> raise SubmissionContextError("User profile not found")
    """

    def __init__(self, message: str, application_id: str | None = None) -> None:
        """
        Initialize submission context error.

        Args:
            message: Error description shown to the user as error_message
            application_id: Related application id (optional)
        """
        self.application_id = application_id
        super().__init__(message)
