"""
Application Repository Interfaces

Exports:
    - ApplicationRepositoryProtocol: Persistence contract (Protocol)
"""

from .application_repository import ApplicationRepositoryProtocol

__all__ = ["ApplicationRepositoryProtocol"]
