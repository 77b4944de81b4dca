"""
Shared Domain Module

Shared domain concepts used across all subdomains.
Contains the domain exception hierarchy.

This module exports:
    - DomainException: Base exception for all domain errors
    - InvalidStatusTransitionError, ApplicationNotFoundError,
      InvalidQueueApplicationsCommandError, SubmissionContextError
"""

from .exceptions import (
    ApplicationNotFoundError,
    DomainException,
    InvalidQueueApplicationsCommandError,
    InvalidStatusTransitionError,
    SubmissionContextError,
)

__all__ = [
    "DomainException",
    "InvalidStatusTransitionError",
    "ApplicationNotFoundError",
    "InvalidQueueApplicationsCommandError",
    "SubmissionContextError",
]
