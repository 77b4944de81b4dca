"""
Application Domain Ports

Protocols for external collaborators consumed by the worker loop.
"""

from .ports import (
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

__all__ = [
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
