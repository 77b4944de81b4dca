"""
Celery Task for the Submission Queue

Runs one ApplicationWorker cycle per invocation.

Responsibility:
    - Hold the process-wide worker registered by the host service
    - Execute exactly one run_once() per task and report its outcome

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Thin orchestrator - the cycle logic lives in ApplicationWorker
    - Claim safety across Celery processes comes from the Redis locks,
      not from Celery; overlapping task runs in one process are serialized
      by the worker's cycle lock
    - The task never retries through Celery: failed submissions are
      requeued by the worker itself
"""

import logging
import threading
from typing import Optional

from .celery_app import celery_app
from src.application.workers.application_worker import ApplicationWorker

# Configure logger for this module
logger = logging.getLogger(__name__)

_worker: Optional[ApplicationWorker] = None
_worker_lock = threading.Lock()


def configure_application_worker(worker: Optional[ApplicationWorker]) -> None:
    """
    Register the worker used by process_application_queue in this process.

    Called once at Celery worker startup (e.g. from a worker_process_init
    signal handler) with create_application_worker(context_provider).
    Passing None unregisters it.
    """
    global _worker

    with _worker_lock:
        _worker = worker

    if worker is None:
        logger.info("Application worker unregistered")
    else:
        logger.info("Application worker registered for Celery tasks")


def get_application_worker() -> Optional[ApplicationWorker]:
    return _worker


@celery_app.task(
    name="process_application_queue",
    max_retries=0,
    time_limit=300,  # 5 minutes hard limit
    soft_time_limit=270,  # Warning 30 seconds before timeout
    ignore_result=False,
)
def process_application_queue() -> dict:
    """
    Run one submission cycle.

    Returns:
        dict: ProcessResult as JSON-compatible dict
            - outcome (str): idle, submitted, requeued, failed, skipped or error
            - application_id (str | None): Application handled in this cycle
            - message (str | None): Confirmation id or error message
        or {"outcome": "not_configured"} when no worker is registered

    Example:
        >>> from src.application.tasks.application_tasks import process_application_queue
        >>> process_application_queue.delay().get(timeout=300)
        {'outcome': 'submitted', 'application_id': '...', 'message': 'conf-123'}
    """
    worker = get_application_worker()
    if worker is None:
        logger.warning("process_application_queue called before a worker was configured")
        return {"outcome": "not_configured", "application_id": None, "message": None}

    result = worker.run_once()

    if result.application_id is not None:
        logger.info(
            f"Submission cycle finished: {result.outcome.value} "
            f"(application {result.application_id})"
        )
    return result.model_dump(mode="json")
