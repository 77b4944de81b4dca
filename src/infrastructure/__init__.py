"""
Infrastructure Layer - External Dependencies

Implements technical capabilities that support the Domain Layer.
Handles all external dependencies: Redis and the job board HTTP API.

Architecture:
    - Implements Domain repository interfaces (Dependency Inversion)
    - Implements Domain ports (SubmissionGatewayProtocol, NotifierProtocol)
    - Depends on external libraries (redis, httpx)
    - No Domain business logic (only technical implementations)

Modules:
    - persistence: Redis queue, notification publisher and repository
    - job_board: HTTP submission gateway

Usage:
    >>> from src.infrastructure import RedisApplicationQueue, HttpJobBoardGateway
    >>>
    >>> # Or import from specific submodules
    >>> from src.infrastructure.persistence import RedisApplicationRepository
"""

# Persistence
from .persistence import (
    RedisApplicationQueue,
    RedisApplicationRepository,
    RedisNotificationPublisher,
)

# Job board
from .job_board import HttpJobBoardGateway

__all__ = [
    # Persistence
    "RedisApplicationQueue",
    "RedisApplicationRepository",
    "RedisNotificationPublisher",
    # Job board
    "HttpJobBoardGateway",
]
