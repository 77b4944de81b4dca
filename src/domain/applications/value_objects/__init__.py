"""
Application Value Objects

Exports:
    - QueueItem: Immutable worklist entry
"""

from .queue_item import QueueItem

__all__ = ["QueueItem"]
