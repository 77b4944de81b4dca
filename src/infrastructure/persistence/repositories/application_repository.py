"""
Application Repository Implementation

Concrete implementation of ApplicationRepositoryProtocol from Domain Layer.
Stores application records in the same Redis database as the submission queue.

Responsibility:
    - Implement Domain repository interface
    - Store/retrieve Application entities as Redis hashes
    - Maintain per-user and per-batch indexes
    - Compare-and-set status writes (WATCH / MULTI), validated against the
      stored status
    - Atomic retry counter (HINCRBY)
    - One-shot batch completion marker (SET NX)

Architecture Notes:
    - Infrastructure Layer (implements Domain interface)
    - Dependency Inversion: Domain defines interface, Infrastructure implements
    - update_status() re-checks the transition table against the stored
      status inside a transaction, so a stale in-memory copy can never
      overwrite a concurrent change (e.g. a cancellation)
"""

import logging
from typing import Final, Optional

from redis import Redis
from redis.client import Pipeline

from src.domain.applications.entities.application import Application
from src.domain.applications.status import is_valid_transition
from src.domain.shared.exceptions import ApplicationNotFoundError, InvalidStatusTransitionError
from src.infrastructure.persistence.redis.connection import get_redis_client

logger = logging.getLogger(__name__)

BATCH_NOTIFIED_TTL_SECONDS: Final[int] = 7 * 24 * 3600

# Fields written by update_status(); retry_count is excluded on purpose
_STATUS_FIELDS: Final[tuple[str, ...]] = (
    "status",
    "confirmation_id",
    "error_message",
    "submitted_at",
    "updated_at",
)


class RedisApplicationRepository:
    """
    Redis-based implementation of ApplicationRepositoryProtocol.

    Storage Strategy:
        - "application:{id}" -> HASH with Application.to_dict() fields (None dropped)
        - "application:user:{user_id}" -> SET of application ids
        - "application:batch:{batch_id}" -> SET of application ids
        - "application:batch:{batch_id}:notified" -> "1" (SET NX, 7 days TTL)

    Examples:
        >>> repo = RedisApplicationRepository()
        >>> repo.save(Application(user_id="u1", job_id="j1", resume_id="r1", batch_id="b1"))
        >>> repo.increment_retry_count(app.id)
        1
    """

    def __init__(self, client: Optional[Redis] = None) -> None:
        """
        Initialize repository.

        Args:
            client: Redis client (default: shared pooled client)
        """
        self.client = client if client is not None else get_redis_client()

    def _get_key(self, application_id: str) -> str:
        return f"application:{application_id}"

    def _get_user_index_key(self, user_id: str) -> str:
        return f"application:user:{user_id}"

    def _get_batch_index_key(self, batch_id: str) -> str:
        return f"application:batch:{batch_id}"

    def save(self, application: Application) -> None:
        """Store all fields of the application and index it by user and batch."""
        mapping = {
            key: value for key, value in application.to_dict().items() if value is not None
        }
        self.client.hset(self._get_key(application.id), mapping=mapping)
        self.client.sadd(self._get_user_index_key(application.user_id), application.id)
        self.client.sadd(self._get_batch_index_key(application.batch_id), application.id)
        logger.debug(f"Saved application {application.id} ({application.status.value})")

    def get_by_id(self, application_id: str) -> Optional[Application]:
        data = self.client.hgetall(self._get_key(application_id))
        if not data:
            return None
        return Application.from_dict(data)

    def update_status(self, application: Application) -> None:
        """
        Write the status-related fields only (never retry_count).

        The stored status is read under WATCH and must be allowed to move to
        application.status; otherwise nothing is written. Status fields that
        are None on the entity are removed from the hash.

        Raises:
            ApplicationNotFoundError: No record for application.id
            InvalidStatusTransitionError: Stored status cannot move to application.status
        """
        key = self._get_key(application.id)
        data = application.to_dict()
        mapping = {
            field_name: data[field_name]
            for field_name in _STATUS_FIELDS
            if data[field_name] is not None
        }
        cleared = [field_name for field_name in _STATUS_FIELDS if data[field_name] is None]
        new_status = application.status.value

        def write_if_allowed(pipe: Pipeline) -> None:
            stored_status = pipe.hget(key, "status")
            if stored_status is None:
                raise ApplicationNotFoundError(
                    f"Application {application.id} not found", application_id=application.id
                )
            if not is_valid_transition(stored_status, new_status):
                raise InvalidStatusTransitionError(
                    f"Invalid status transition from {stored_status} to {new_status}",
                    current_status=stored_status,
                    target_status=new_status,
                )

            pipe.multi()
            pipe.hset(key, mapping=mapping)
            if cleared:
                pipe.hdel(key, *cleared)

        # transaction() retries write_if_allowed when the key changes after WATCH
        self.client.transaction(write_if_allowed, key)

    def increment_retry_count(self, application_id: str) -> int:
        return int(self.client.hincrby(self._get_key(application_id), "retry_count", 1))

    def list_by_user(self, user_id: str) -> list[Application]:
        """Applications of user_id, newest first."""
        applications = self._load_many(self.client.smembers(self._get_user_index_key(user_id)))
        return sorted(applications, key=lambda app: app.created_at, reverse=True)

    def list_by_batch(self, batch_id: str) -> list[Application]:
        applications = self._load_many(self.client.smembers(self._get_batch_index_key(batch_id)))
        return sorted(applications, key=lambda app: app.created_at)

    def mark_batch_notified(self, batch_id: str) -> bool:
        marked = self.client.set(
            f"{self._get_batch_index_key(batch_id)}:notified",
            "1",
            ex=BATCH_NOTIFIED_TTL_SECONDS,
            nx=True,
        )
        return bool(marked)

    def _load_many(self, application_ids: set[str]) -> list[Application]:
        applications = []
        for application_id in application_ids:
            application = self.get_by_id(application_id)
            if application is None:
                # Index entry outlived its record
                logger.warning(f"Application {application_id} indexed but not found")
                continue
            applications.append(application)
        return applications
