"""
Redis Infrastructure Module

Redis-based implementations for the submission queue and notifications.

Exports:
    - RedisApplicationQueue: Submission worklist with item and user locks
    - RedisNotificationPublisher: Publish user notifications
    - get_redis_client: Get Redis client with connection pooling
    - health_check: Check Redis health with PING test
    - close_connections: Close all Redis connections
"""

from .application_queue import RedisApplicationQueue
from .connection import close_connections, get_redis_client, health_check
from .notification_publisher import RedisNotificationPublisher

__all__ = [
    "RedisApplicationQueue",
    "RedisNotificationPublisher",
    "get_redis_client",
    "health_check",
    "close_connections",
]
