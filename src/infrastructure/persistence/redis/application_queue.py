"""
Redis Application Queue (Submission Queue & Lock Manager)

Shared ordered worklist of applications waiting for submission, plus the
lease locks that guarantee at most one in-flight claim per application and
per user.

Responsibility:
    - Append items to the tail of the worklist (single and batch)
    - Claim items with a windowed head scan that skips busy users
    - Release, requeue and withdraw items
    - Read-only introspection (length, items, lock state)

Storage Format:
    Redis keys:
    - "queue:applications" -> LIST of JSON QueueItem entries (RPUSH tail, scan from head)
    - "queue:processing:{application_id}" -> "1" with TTL (item lock)
    - "queue:user_processing:{user_id}" -> claiming application_id with TTL (user lock)

Business Rules:
    - Lock TTL: 300s by default (a lease, not a deadline on the operation)
    - Scan window: first 10 entries by default (bounds dequeue latency)
    - A user with a held user lock is skipped, not waited for
    - Item lock acquisition is SET NX EX; losing the race means skip
    - requeue() appends to the tail with a fresh queued_at (position is lost)

Concurrency Notes:
    - Cross-process correctness relies only on the atomicity of SET NX EX
    - Claim semantics are at-least-once: a worker that outlives its lease can
      race with a new claimant; no fencing token is used
    - The user lock check (GET) and the user lock write (SET) are separate
      commands; two workers claiming two different items of the same user in
      the same instant can both pass the GET
"""

import logging
from typing import Final, Optional

from redis import Redis

from src.domain.applications.value_objects.queue_item import QueueItem
from .connection import get_redis_client

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TTL_SECONDS: Final[int] = 300
DEFAULT_SCAN_WINDOW: Final[int] = 10


class RedisApplicationQueue:
    """
    Submission worklist and lock manager backed by Redis.

    Examples:
        >>> queue = RedisApplicationQueue()
        >>> queue.enqueue_batch([QueueItem("a1", "u1", "j1", "r1")])
        >>> item = queue.dequeue()
        >>> try:
        ...     submit(item)
        ... finally:
        ...     queue.release_lock(item.application_id, item.user_id)
    """

    QUEUE_KEY: Final[str] = "queue:applications"
    PROCESSING_LOCK_PREFIX: Final[str] = "queue:processing:"
    USER_PROCESSING_PREFIX: Final[str] = "queue:user_processing:"

    def __init__(
        self,
        client: Optional[Redis] = None,
        lock_ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS,
        scan_window: int = DEFAULT_SCAN_WINDOW,
    ) -> None:
        """
        Initialize queue.

        Args:
            client: Redis client (default: shared pooled client)
            lock_ttl_seconds: Lease duration for item and user locks
            scan_window: Number of head entries inspected per dequeue()
        """
        if lock_ttl_seconds < 1:
            raise ValueError(f"lock_ttl_seconds must be >= 1, got {lock_ttl_seconds}")
        if scan_window < 1:
            raise ValueError(f"scan_window must be >= 1, got {scan_window}")

        self.client = client if client is not None else get_redis_client()
        self.lock_ttl_seconds = lock_ttl_seconds
        self.scan_window = scan_window

    # ------------------------------------------------------------------
    # Key helpers
    # ------------------------------------------------------------------

    def _get_item_lock_key(self, application_id: str) -> str:
        return f"{self.PROCESSING_LOCK_PREFIX}{application_id}"

    def _get_user_lock_key(self, user_id: str) -> str:
        return f"{self.USER_PROCESSING_PREFIX}{user_id}"

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    def enqueue(self, item: QueueItem) -> None:
        """Append one item to the tail of the worklist."""
        self.client.rpush(self.QUEUE_KEY, item.to_json())
        logger.debug(f"Enqueued application {item.application_id} for user {item.user_id}")

    def enqueue_batch(self, items: list[QueueItem]) -> None:
        """
        Append items to the tail in one RPUSH, preserving their order.

        No uniqueness check is made; an empty list is a no-op.
        """
        if not items:
            return

        self.client.rpush(self.QUEUE_KEY, *(item.to_json() for item in items))
        logger.debug(f"Enqueued {len(items)} applications")

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def dequeue(self) -> Optional[QueueItem]:
        """
        Claim the first eligible item inside the scan window.

        Process Flow (per candidate, head first):
            1. Skip entries that cannot be deserialized (logged)
            2. Skip if the user lock exists for the item's user
            3. SET item lock NX EX ttl; skip if another worker holds it
            4. SET user lock (value = application_id) NX EX ttl; if another
               worker took it since step 2, drop the item lock and skip
            5. LREM exactly one matching entry and return the item

        Returns:
            Claimed QueueItem, or None when nothing in the window is eligible
        """
        entries = self.client.lrange(self.QUEUE_KEY, 0, self.scan_window - 1)

        for serialized in entries:
            item = self._deserialize_item(serialized)
            if item is None:
                continue

            user_lock_key = self._get_user_lock_key(item.user_id)
            if self.client.get(user_lock_key):
                continue

            item_lock_key = self._get_item_lock_key(item.application_id)
            lock_acquired = self.client.set(
                item_lock_key,
                "1",
                ex=self.lock_ttl_seconds,
                nx=True,
            )
            if not lock_acquired:
                continue

            user_locked = self.client.set(
                user_lock_key, item.application_id, ex=self.lock_ttl_seconds, nx=True
            )
            if not user_locked:
                self.client.delete(item_lock_key)
                continue

            self.client.lrem(self.QUEUE_KEY, 1, serialized)

            logger.debug(f"Dequeued application {item.application_id} for processing")
            return item

        return None

    def release_lock(self, application_id: str, user_id: str) -> None:
        """Delete item and user locks unconditionally (idempotent)."""
        self.client.delete(self._get_item_lock_key(application_id))
        self.client.delete(self._get_user_lock_key(user_id))
        logger.debug(f"Released lock for application {application_id}")

    def requeue(self, item: QueueItem) -> None:
        """Release the item's locks and append it to the tail with a fresh queued_at."""
        self.release_lock(item.application_id, item.user_id)
        self.enqueue(item.refreshed())
        logger.debug(f"Re-queued application {item.application_id}")

    def remove_from_queue(self, application_id: str) -> bool:
        """
        Withdraw a not-yet-claimed item (explicit cancellation).

        Returns:
            True if an entry was removed, False if none matched
        """
        entries = self.client.lrange(self.QUEUE_KEY, 0, -1)

        for serialized in entries:
            item = self._deserialize_item(serialized)
            if item is not None and item.application_id == application_id:
                removed = self.client.lrem(self.QUEUE_KEY, 1, serialized)
                if removed > 0:
                    logger.debug(f"Removed application {application_id} from queue")
                    return True

        return False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_queue_length(self) -> int:
        return int(self.client.llen(self.QUEUE_KEY))

    def get_queue_items(self, start: int = 0, stop: int = -1) -> list[QueueItem]:
        """Items in worklist order (inclusive range, Redis LRANGE semantics)."""
        entries = self.client.lrange(self.QUEUE_KEY, start, stop)
        items = [self._deserialize_item(entry) for entry in entries]
        return [item for item in items if item is not None]

    def is_processing(self, application_id: str) -> bool:
        return self.client.get(self._get_item_lock_key(application_id)) is not None

    def is_user_processing(self, user_id: str) -> bool:
        return self.client.get(self._get_user_lock_key(user_id)) is not None

    def _deserialize_item(self, serialized: str) -> Optional[QueueItem]:
        try:
            return QueueItem.from_json(serialized)
        except ValueError as e:
            logger.error(f"Failed to deserialize queue item: {e}")
            return None
