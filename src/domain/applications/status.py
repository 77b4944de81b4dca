"""
Application Status State Machine

Table-driven validator of legal status transitions for a tracked application.

Business Context:
    An application is created PENDING when its batch is queued, claimed by a
    worker (PROCESSING), and then either SUBMITTED, put back to PENDING for a
    retry, or FAILED once retries are exhausted. A user can CANCEL it only
    while it is still PENDING.

    PENDING ──> PROCESSING ──> SUBMITTED (terminal)
       │  ^          │
       │  └──────────┤ (retry)
       │             └──> FAILED ──> PENDING (manual retry)
       └──> CANCELLED (terminal)

Design Principles:
    - One table, one lookup function, used by every mutation path
    - Pure and deterministic: no I/O, no logging
    - Self-transitions are always illegal
"""

from enum import Enum
from typing import Final


class ApplicationStatus(str, Enum):
    """
    Lifecycle states of a job application.

    Attributes:
        PENDING: Waiting in the submission queue
        PROCESSING: Claimed by a worker, submission in flight
        SUBMITTED: Accepted by the job board (terminal)
        FAILED: Permanent failure or retries exhausted
        CANCELLED: Withdrawn by the user before it was claimed (terminal)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    SUBMITTED = "submitted"
    FAILED = "failed"
    CANCELLED = "cancelled"


VALID_STATUS_TRANSITIONS: Final[dict[ApplicationStatus, frozenset[ApplicationStatus]]] = {
    ApplicationStatus.PENDING: frozenset(
        {ApplicationStatus.PROCESSING, ApplicationStatus.CANCELLED}
    ),
    ApplicationStatus.PROCESSING: frozenset(
        {
            ApplicationStatus.SUBMITTED,
            ApplicationStatus.FAILED,
            ApplicationStatus.PENDING,
        }
    ),
    ApplicationStatus.SUBMITTED: frozenset(),
    ApplicationStatus.FAILED: frozenset({ApplicationStatus.PENDING}),
    ApplicationStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: Final[frozenset[ApplicationStatus]] = frozenset(
    {ApplicationStatus.SUBMITTED, ApplicationStatus.CANCELLED}
)


def is_valid_transition(
    current_status: ApplicationStatus | str, new_status: ApplicationStatus | str
) -> bool:
    """
    Check whether moving from current_status to new_status is allowed.

    Accepts enum members or their string values. Unknown statuses are never
    valid.

    Args:
        current_status: Status the application is in
        new_status: Requested status

    Returns:
        True if the transition appears in VALID_STATUS_TRANSITIONS

    Examples:
        >>> is_valid_transition(ApplicationStatus.PENDING, ApplicationStatus.PROCESSING)
        True
        >>> is_valid_transition("submitted", "pending")
        False
        >>> is_valid_transition(ApplicationStatus.FAILED, ApplicationStatus.FAILED)
        False
    """
    try:
        current = ApplicationStatus(current_status)
        target = ApplicationStatus(new_status)
    except ValueError:
        return False
    return target in VALID_STATUS_TRANSITIONS[current]


def is_terminal(status: ApplicationStatus | str) -> bool:
    """Return True for statuses that admit no further transition."""
    return ApplicationStatus(status) in TERMINAL_STATUSES


def allowed_transitions(status: ApplicationStatus | str) -> frozenset[ApplicationStatus]:
    """Return the set of statuses reachable from status in one step."""
    return VALID_STATUS_TRANSITIONS[ApplicationStatus(status)]
