"""
Domain Layer - Core Business Logic

Business rules of the application submission core: the application entity and
its status state machine, the queue item value object, the repository
interface and the ports of external collaborators. Framework-independent and
highly testable.

Architecture:
    - Clean Architecture: Domain Layer is the center, no external dependencies
    - Domain-Driven Design: Entities, Value Objects, Repositories
    - Dependency Inversion: Domain defines interfaces, Infrastructure implements

Subdomains:
    - applications: Job application lifecycle
    - shared: Cross-subdomain concepts (exceptions)

Usage:
    >>> from src.domain import Application, ApplicationStatus, DomainException
    >>> from src.domain.applications import is_valid_transition
"""

from .applications import (
    Application,
    ApplicationRepositoryProtocol,
    ApplicationStatus,
    QueueItem,
    is_valid_transition,
)
from .shared import DomainException

__all__ = [
    "Application",
    "ApplicationStatus",
    "ApplicationRepositoryProtocol",
    "QueueItem",
    "is_valid_transition",
    "DomainException",
]
