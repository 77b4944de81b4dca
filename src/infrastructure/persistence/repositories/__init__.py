"""
Repository Implementations Module

Concrete implementations of Domain repository interfaces.

Exports:
    - RedisApplicationRepository: Redis-based ApplicationRepositoryProtocol
"""

from .application_repository import RedisApplicationRepository

__all__ = [
    "RedisApplicationRepository",
]
