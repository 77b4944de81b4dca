"""
Tests for the application status state machine.

Covers:
- Every (from, to) pair against the transition table
- Self-transitions and terminal statuses
- String inputs and unknown values
"""

import itertools

import pytest

from src.domain.applications.status import (
    TERMINAL_STATUSES,
    VALID_STATUS_TRANSITIONS,
    ApplicationStatus,
    allowed_transitions,
    is_terminal,
    is_valid_transition,
)

S = ApplicationStatus

EXPECTED_ALLOWED = {
    (S.PENDING, S.PROCESSING),
    (S.PENDING, S.CANCELLED),
    (S.PROCESSING, S.SUBMITTED),
    (S.PROCESSING, S.FAILED),
    (S.PROCESSING, S.PENDING),
    (S.FAILED, S.PENDING),
}


# ============================================================================
# TRANSITION TABLE
# ============================================================================


@pytest.mark.parametrize(
    "current,target", list(itertools.product(ApplicationStatus, ApplicationStatus))
)
def test_every_pair_matches_table(current, target):
    assert is_valid_transition(current, target) == ((current, target) in EXPECTED_ALLOWED)


def test_table_covers_every_status():
    assert set(VALID_STATUS_TRANSITIONS) == set(ApplicationStatus)


def test_self_transitions_are_illegal():
    for status in ApplicationStatus:
        assert is_valid_transition(status, status) is False


def test_terminal_statuses_have_no_outgoing_transitions():
    assert TERMINAL_STATUSES == {S.SUBMITTED, S.CANCELLED}
    for status in TERMINAL_STATUSES:
        assert allowed_transitions(status) == frozenset()
        assert is_terminal(status)


def test_failed_is_not_terminal():
    """FAILED can be re-queued (FAILED -> PENDING)."""
    assert is_terminal(S.FAILED) is False
    assert allowed_transitions(S.FAILED) == {S.PENDING}


# ============================================================================
# INPUT FORMS
# ============================================================================


def test_accepts_string_values():
    assert is_valid_transition("pending", "processing") is True
    assert is_valid_transition("submitted", "pending") is False


def test_unknown_status_is_never_valid():
    assert is_valid_transition("archived", "pending") is False
    assert is_valid_transition(S.PENDING, "archived") is False


def test_status_values_are_lowercase_strings():
    assert [status.value for status in ApplicationStatus] == [
        "pending",
        "processing",
        "submitted",
        "failed",
        "cancelled",
    ]
