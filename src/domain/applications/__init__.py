"""
Applications Subdomain

Job application lifecycle: entity, status state machine, queue item value
object, repository interface and collaborator ports.

Exports:
    - Application: Core entity
    - ApplicationStatus, is_valid_transition, is_terminal: State machine
    - QueueItem: Worklist entry
    - ApplicationRepositoryProtocol: Repository interface
    - Submission ports and DTOs
"""

from .entities import Application
from .repositories import ApplicationRepositoryProtocol
from .services import (
    ApplicantInfo,
    Notification,
    NotificationType,
    NotifierProtocol,
    SubmissionContext,
    SubmissionContextProviderProtocol,
    SubmissionGatewayProtocol,
    SubmissionPayload,
    SubmissionResult,
    TransientSubmissionError,
)
from .status import (
    VALID_STATUS_TRANSITIONS,
    ApplicationStatus,
    allowed_transitions,
    is_terminal,
    is_valid_transition,
)
from .value_objects import QueueItem

__all__ = [
    "Application",
    "ApplicationStatus",
    "VALID_STATUS_TRANSITIONS",
    "allowed_transitions",
    "is_terminal",
    "is_valid_transition",
    "QueueItem",
    "ApplicationRepositoryProtocol",
    "ApplicantInfo",
    "Notification",
    "NotificationType",
    "NotifierProtocol",
    "SubmissionContext",
    "SubmissionContextProviderProtocol",
    "SubmissionGatewayProtocol",
    "SubmissionPayload",
    "SubmissionResult",
    "TransientSubmissionError",
]
