"""
Tests for QueueApplicationsCommand.

Covers:
- Job id normalization (strip, de-duplicate, keep order)
- Business rules validation collecting every error
"""

import pytest

from src.application.commands.queue_applications import QueueApplicationsCommand
from src.domain.shared.exceptions import InvalidQueueApplicationsCommandError


def test_unique_job_ids_keeps_first_occurrence():
    command = QueueApplicationsCommand(resume_id="r1", job_ids=["j2", " j1 ", "j2", "", "j1"])

    assert command.unique_job_ids() == ["j2", "j1"]


def test_valid_command_passes():
    QueueApplicationsCommand(resume_id="r1", job_ids=["j1"], cover_letter="Hi").validate_business_rules()


def test_collects_all_errors():
    command = QueueApplicationsCommand(resume_id="  ", job_ids=["", "  "])

    with pytest.raises(InvalidQueueApplicationsCommandError) as exc_info:
        command.validate_business_rules()

    assert exc_info.value.errors == [
        "resume_id must not be empty",
        "job_ids must contain at least one job id",
    ]
    assert exc_info.value.has_errors()


def test_rejects_oversized_batch():
    job_ids = [f"job-{i}" for i in range(QueueApplicationsCommand.MAX_JOBS_PER_BATCH + 1)]

    with pytest.raises(InvalidQueueApplicationsCommandError, match="maximum allowed is 100"):
        QueueApplicationsCommand(resume_id="r1", job_ids=job_ids).validate_business_rules()


def test_max_jobs_is_not_a_field():
    assert "MAX_JOBS_PER_BATCH" not in QueueApplicationsCommand.model_fields
