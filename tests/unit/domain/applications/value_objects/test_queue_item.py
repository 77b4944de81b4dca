"""
Tests for QueueItem value object.
"""

import json
from datetime import datetime

import pytest

from src.domain.applications.value_objects.queue_item import QueueItem


def test_to_json_uses_snake_case_and_iso_timestamp():
    item = QueueItem("app-1", "user-1", "job-1", "resume-1", queued_at=datetime(2026, 5, 1, 12, 0))

    data = json.loads(item.to_json())

    assert data == {
        "application_id": "app-1",
        "user_id": "user-1",
        "job_id": "job-1",
        "resume_id": "resume-1",
        "queued_at": "2026-05-01T12:00:00",
    }


def test_from_json_restores_equal_item():
    item = QueueItem("app-1", "user-1", "job-1", "resume-1")
    assert QueueItem.from_json(item.to_json()) == item


@pytest.mark.parametrize(
    "serialized",
    [
        "not json",
        "[]",
        '"text"',
        json.dumps({"application_id": "a", "user_id": "u"}),
        json.dumps(
            {
                "application_id": "a",
                "user_id": "u",
                "job_id": "j",
                "resume_id": "r",
                "queued_at": "yesterday",
            }
        ),
    ],
)
def test_from_json_rejects_malformed_entries(serialized):
    with pytest.raises(ValueError):
        QueueItem.from_json(serialized)


def test_refreshed_only_changes_queued_at():
    item = QueueItem("app-1", "user-1", "job-1", "resume-1", queued_at=datetime(2020, 1, 1))

    refreshed = item.refreshed()

    assert refreshed.queued_at > item.queued_at
    assert (refreshed.application_id, refreshed.user_id, refreshed.job_id, refreshed.resume_id) == (
        "app-1",
        "user-1",
        "job-1",
        "resume-1",
    )
    assert item.queued_at == datetime(2020, 1, 1)
