"""
Redis Notification Publisher

NotifierProtocol implementation that hands notifications to the delivery
service through Redis.

Storage Format:
    - PUBLISH "notifications:{user_id}" <json>  (live consumers)
    - "notifications:{user_id}:inbox" -> LIST of the last 50 notifications (newest first)

Error Handling:
    - On RedisError: log warning, do NOT raise. Notifications are
      fire-and-forget and must never affect queue or lock state.
"""

import json
import logging
from datetime import datetime
from typing import Final, Optional

from redis import Redis
from redis.exceptions import RedisError

from src.domain.applications.services.ports import Notification
from .connection import get_redis_client

logger = logging.getLogger(__name__)

INBOX_MAX_ENTRIES: Final[int] = 50
INBOX_TTL_SECONDS: Final[int] = 30 * 24 * 3600


class RedisNotificationPublisher:
    """
    Publish notifications for the delivery service.

    Examples:
        >>> publisher = RedisNotificationPublisher()
        >>> publisher.send_notification("user-1", notification)
    """

    def __init__(self, client: Optional[Redis] = None) -> None:
        self.client = client if client is not None else get_redis_client()

    def _get_channel(self, user_id: str) -> str:
        return f"notifications:{user_id}"

    def _get_inbox_key(self, user_id: str) -> str:
        return f"notifications:{user_id}:inbox"

    def send_notification(self, user_id: str, notification: Notification) -> None:
        payload = notification.to_dict()
        payload["user_id"] = user_id
        payload["created_at"] = datetime.now().isoformat()
        message = json.dumps(payload)

        try:
            # Atomic operation: publish + bounded inbox using pipeline (MULTI/EXEC)
            pipe = self.client.pipeline()
            pipe.publish(self._get_channel(user_id), message)
            pipe.lpush(self._get_inbox_key(user_id), message)
            pipe.ltrim(self._get_inbox_key(user_id), 0, INBOX_MAX_ENTRIES - 1)
            pipe.expire(self._get_inbox_key(user_id), INBOX_TTL_SECONDS)
            pipe.execute()

            logger.debug(f"Published {notification.type.value} notification for user {user_id}")

        except RedisError as e:
            logger.warning(
                f"Redis error publishing {notification.type.value} notification "
                f"for user {user_id}: {e}"
            )
