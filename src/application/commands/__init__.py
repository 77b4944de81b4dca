"""
Application Commands (CQRS write side)

Exports:
    - QueueApplicationsCommand: Batch submission request
"""

from .queue_applications import QueueApplicationsCommand

__all__ = ["QueueApplicationsCommand"]
