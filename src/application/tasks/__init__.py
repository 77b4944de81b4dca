"""
Celery Tasks

Responsibility:
    Task definitions that run the submission worker inside Celery.

Contains:
    - celery_app.py - Celery configuration (optional beat schedule)
    - application_tasks.py - process_application_queue (one worker cycle)

Does NOT contain:
    - Business logic (delegates to ApplicationWorker)
"""

from .celery_app import celery_app, health_check
from .application_tasks import configure_application_worker, process_application_queue

__all__ = [
    "celery_app",
    "health_check",
    "configure_application_worker",
    "process_application_queue",
]
