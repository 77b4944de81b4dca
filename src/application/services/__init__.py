"""
Application Services

Responsibility:
    Orchestration services that coordinate domain entities and
    infrastructure components.

Contains:
    - AutoSenderService: application records and the submission worklist

Does NOT contain:
    - Domain business logic (use Domain entities and status table)
    - Direct infrastructure construction (use dependency injection)
"""

from .auto_sender_service import AutoSenderService

__all__ = ["AutoSenderService"]
