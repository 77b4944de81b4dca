"""
Tests for the Celery tasks.

Tasks are called directly (synchronously); no broker is needed.

Covers:
- Task configuration (name, retries, timeouts)
- process_application_queue before and after a worker is registered
- health_check reporting
"""

import importlib
from unittest.mock import MagicMock, patch

import pytest

from src.application.models import ProcessOutcome, ProcessResult
from src.application.tasks.application_tasks import (
    configure_application_worker,
    get_application_worker,
    process_application_queue,
)
from src.application.tasks.celery_app import health_check

celery_app_module = importlib.import_module("src.application.tasks.celery_app")


@pytest.fixture(autouse=True)
def unregister_worker():
    yield
    configure_application_worker(None)


# ============================================================================
# CONFIGURATION TESTS
# ============================================================================


def test_task_is_configured_correctly():
    assert process_application_queue.name == "process_application_queue"
    assert process_application_queue.max_retries == 0
    assert process_application_queue.time_limit == 300
    assert process_application_queue.soft_time_limit == 270


def test_task_is_registered_with_celery_app():
    assert "process_application_queue" in celery_app_module.celery_app.tasks
    assert "health_check" in celery_app_module.celery_app.tasks


# ============================================================================
# process_application_queue
# ============================================================================


def test_returns_not_configured_without_worker():
    assert process_application_queue() == {
        "outcome": "not_configured",
        "application_id": None,
        "message": None,
    }


def test_runs_one_cycle_on_registered_worker():
    worker = MagicMock()
    worker.run_once.return_value = ProcessResult(
        outcome=ProcessOutcome.SUBMITTED, application_id="app-1", message="conf-1"
    )
    configure_application_worker(worker)

    result = process_application_queue()

    worker.run_once.assert_called_once_with()
    assert result == {"outcome": "submitted", "application_id": "app-1", "message": "conf-1"}


def test_configure_none_unregisters():
    configure_application_worker(MagicMock())
    configure_application_worker(None)

    assert get_application_worker() is None


# ============================================================================
# health_check
# ============================================================================


@pytest.mark.parametrize("redis_ok,expected", [(True, "ok"), (False, "degraded")])
def test_health_check_reports_redis(redis_ok, expected):
    with patch.object(celery_app_module, "redis_health_check", return_value=redis_ok):
        result = health_check()

    assert result["status"] == expected
    assert result["redis"] is redis_ok
    assert "timestamp" in result
