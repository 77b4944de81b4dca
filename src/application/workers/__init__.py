"""
Application Workers

Exports:
    - ApplicationWorker: Submission loop (thread or run_once)
    - create_application_worker: Wire a worker with Redis and HTTP implementations
"""

from .application_worker import ApplicationWorker, create_application_worker

__all__ = ["ApplicationWorker", "create_application_worker"]
