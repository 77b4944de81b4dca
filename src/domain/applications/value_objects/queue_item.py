"""
QueueItem Value Object.

Immutable unit of work stored in the shared submission worklist.
Identity is application_id; ordering is insertion order in the worklist.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime


@dataclass(frozen=True)
class QueueItem:
    """
    One application waiting to be claimed by a worker.

    Attributes:
        application_id: Application this item submits (identity)
        user_id: Owner, used for the per-user lock
        job_id: Target job posting
        resume_id: Resume to attach
        queued_at: Time the item was (re)appended to the worklist

    Examples:
        >>> item = QueueItem("app-1", "user-1", "job-1", "resume-1")
        >>> QueueItem.from_json(item.to_json()) == item
        True
    """

    application_id: str
    user_id: str
    job_id: str
    resume_id: str
    queued_at: datetime = field(default_factory=datetime.now)

    def to_json(self) -> str:
        """Serialize for RPUSH. queued_at is written as ISO-8601."""
        return json.dumps(
            {
                "application_id": self.application_id,
                "user_id": self.user_id,
                "job_id": self.job_id,
                "resume_id": self.resume_id,
                "queued_at": self.queued_at.isoformat(),
            }
        )

    @classmethod
    def from_json(cls, serialized: str) -> "QueueItem":
        """
        Deserialize a worklist entry.

        Raises:
            ValueError: If the entry is not valid JSON or misses a field
        """
        try:
            data = json.loads(serialized)
            return cls(
                application_id=data["application_id"],
                user_id=data["user_id"],
                job_id=data["job_id"],
                resume_id=data["resume_id"],
                queued_at=datetime.fromisoformat(data["queued_at"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ValueError(f"Malformed queue item: {e}") from e

    def refreshed(self) -> "QueueItem":
        """Copy with queued_at set to now (used when requeueing)."""
        return replace(self, queued_at=datetime.now())
