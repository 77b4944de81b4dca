"""
QueueApplicationsCommand - CQRS Write Command

Encapsulates one batch submission request: a resume and the jobs to apply to.

Responsibility:
    - Data holder for batch submission
    - Business rules validation (ids present, batch size bounded)
    - Normalization of job ids (stripped, de-duplicated, order kept)

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Used by AutoSenderService.queue_applications()
    - Does NOT check for existing applications (service responsibility)
"""

from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from src.domain.shared.exceptions import InvalidQueueApplicationsCommandError


class QueueApplicationsCommand(BaseModel):
    """
    Command to queue applications for several jobs with one resume.

    Attributes:
        resume_id: Resume attached to every application
        job_ids: Jobs to apply to, in submission order
        cover_letter: Optional cover letter shared by the batch

    Business Rules (validated in validate_business_rules()):
        - resume_id must not be blank
        - job_ids must contain at least one non-blank id
        - At most MAX_JOBS_PER_BATCH distinct job ids

    Examples:
        >>> command = QueueApplicationsCommand(resume_id="r1", job_ids=["j1", "j2", "j1"])
        >>> command.validate_business_rules()
        >>> command.unique_job_ids()
        ['j1', 'j2']
    """

    resume_id: str = Field(description="Resume attached to every application")
    job_ids: list[str] = Field(description="Jobs to apply to, in order")
    cover_letter: Optional[str] = Field(default=None, description="Optional cover letter")

    MAX_JOBS_PER_BATCH: ClassVar[int] = 100

    def unique_job_ids(self) -> list[str]:
        """Stripped job ids without blanks or repeats, first occurrence wins."""
        seen: set[str] = set()
        unique: list[str] = []
        for job_id in self.job_ids:
            job_id = job_id.strip()
            if job_id and job_id not in seen:
                seen.add(job_id)
                unique.append(job_id)
        return unique

    def validate_business_rules(self) -> None:
        """
        Validate command against business rules.

        Collects all validation errors and raises one exception with the full list.

        Raises:
            InvalidQueueApplicationsCommandError: If any business rule is violated
        """
        errors: list[str] = []

        if not self.resume_id.strip():
            errors.append("resume_id must not be empty")

        job_ids = self.unique_job_ids()
        if not job_ids:
            errors.append("job_ids must contain at least one job id")
        elif len(job_ids) > self.MAX_JOBS_PER_BATCH:
            errors.append(
                f"job_ids contains {len(job_ids)} jobs, "
                f"maximum allowed is {self.MAX_JOBS_PER_BATCH}"
            )

        if errors:
            raise InvalidQueueApplicationsCommandError(
                "QueueApplicationsCommand validation failed", errors=errors
            )
