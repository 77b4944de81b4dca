"""
Celery application initialization.

Hosts the submission worker as a periodic Celery task for deployments that
already run Celery workers instead of a dedicated worker process.

Architecture Note:
- Part of Application Layer (orchestration)
- Uses environment variables for configuration
- No business logic - pure infrastructure setup
- Beat schedule is opt-in (APPLICATION_QUEUE_BEAT_ENABLED=true) and fires
  process_application_queue every APPLICATION_POLL_INTERVAL_MS
"""

import logging
import os
from datetime import datetime

from celery import Celery
from dotenv import load_dotenv

from src.infrastructure.persistence.redis.connection import health_check as redis_health_check

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

celery_app = Celery(
    "job_autosender",
    broker=os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0"),
    backend=os.environ.get("CELERY_RESULT_BACKEND", "redis://localhost:6379/1"),
)

celery_app.conf.update(
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    result_expires=3600,  # Results expire after 1 hour
)

if os.environ.get("APPLICATION_QUEUE_BEAT_ENABLED", "false").lower() == "true":
    celery_app.conf.beat_schedule = {
        "process-application-queue": {
            "task": "process_application_queue",
            "schedule": int(os.environ.get("APPLICATION_POLL_INTERVAL_MS", "5000")) / 1000,
        },
    }

celery_app.autodiscover_tasks(["src.application.tasks"])


@celery_app.task(name="health_check")
def health_check() -> dict:
    """
    Verify the Celery pipeline and the shared Redis store.

    Returns:
        dict: Status information with timestamp
            - status (str): "ok" if Redis answers PING, "degraded" otherwise
            - redis (bool): Redis PING result
            - timestamp (str): ISO format timestamp
            - worker (str): Worker hostname that executed the task
    """
    redis_ok = redis_health_check()
    return {
        "status": "ok" if redis_ok else "degraded",
        "redis": redis_ok,
        "timestamp": datetime.now().isoformat(),
        "worker": (
            celery_app.current_task.request.hostname
            if celery_app.current_task
            else "unknown"
        ),
    }
