"""
Persistence Infrastructure Module

Data persistence implementations (Redis, repositories).

Exports:
    From redis:
        - RedisApplicationQueue
        - RedisNotificationPublisher

    From repositories:
        - RedisApplicationRepository
"""

from .redis import RedisApplicationQueue, RedisNotificationPublisher
from .repositories import RedisApplicationRepository

__all__ = [
    "RedisApplicationQueue",
    "RedisNotificationPublisher",
    "RedisApplicationRepository",
]
