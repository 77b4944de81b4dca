"""
Pytest Configuration and Shared Fixtures

This module contains pytest configuration and shared fixtures used across
all test suites (unit, e2e).

Fixtures:
    - fake_redis: Stateful in-memory Redis with a controllable clock
    - queue / repository / service: Real Redis-backed components on fake_redis
    - context_provider / gateway / notifier: Scriptable worker collaborators
    - worker_settings: Fast settings (no backoff, small retry budgets)

Architecture Notes:
    - No Redis server needed: InMemoryRedis implements the commands the
      project uses with Redis semantics (inclusive LRANGE, SET NX EX, TTLs)
    - Key expiry follows fake_redis.advance(seconds), never wall time
    - Values are stored as str, like a client with decode_responses=True

Usage:
    def test_claim(queue, fake_redis):
        queue.enqueue(item)
        assert queue.dequeue() == item
"""

from __future__ import annotations

import fnmatch
import logging
from typing import Any, Optional

import pytest

from src.application.config import WorkerSettings
from src.application.services.auto_sender_service import AutoSenderService
from src.domain.applications.entities.application import Application
from src.domain.applications.services.ports import (
    ApplicantInfo,
    Notification,
    SubmissionContext,
    SubmissionPayload,
    SubmissionResult,
)
from src.domain.shared.exceptions import SubmissionContextError
from src.infrastructure.persistence.redis.application_queue import RedisApplicationQueue
from src.infrastructure.persistence.repositories.application_repository import (
    RedisApplicationRepository,
)

# Configure logger for tests
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# IN-MEMORY REDIS
# ============================================================================


class InMemoryPipeline:
    """
    Buffers commands and runs them on execute(), like a MULTI/EXEC pipeline.

    After watch() commands run immediately (as in redis-py) until multi()
    switches back to buffering. WATCH never detects conflicts here: the
    double is single-threaded, so nothing can interleave inside a transaction.
    """

    def __init__(self, redis: InMemoryRedis) -> None:
        self._redis = redis
        self._commands: list[tuple[str, tuple, dict]] = []
        self._immediate = False

    def watch(self, *names: str) -> bool:
        self._immediate = True
        return True

    def multi(self) -> None:
        self._immediate = False

    def reset(self) -> None:
        self._commands = []
        self._immediate = False

    def __getattr__(self, name: str):
        if self._immediate:
            return getattr(self._redis, name)

        def queue_command(*args: Any, **kwargs: Any) -> InMemoryPipeline:
            self._commands.append((name, args, kwargs))
            return self

        return queue_command

    def execute(self) -> list[Any]:
        results = [getattr(self._redis, name)(*args, **kwargs) for name, args, kwargs in self._commands]
        self.reset()
        return results


class InMemoryRedis:
    """Single-threaded stand-in for redis.Redis(decode_responses=True)."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._expires_at: dict[str, float] = {}
        self.now = 0.0
        self.published: list[tuple[str, str]] = []

    # -- clock ---------------------------------------------------------

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _alive(self, name: str) -> bool:
        deadline = self._expires_at.get(name)
        if deadline is not None and deadline <= self.now:
            self._data.pop(name, None)
            self._expires_at.pop(name, None)
        return name in self._data

    # -- generic -------------------------------------------------------

    def ping(self) -> bool:
        return True

    def flushdb(self) -> bool:
        self._data.clear()
        self._expires_at.clear()
        return True

    def exists(self, *names: str) -> int:
        return sum(1 for name in names if self._alive(name))

    def delete(self, *names: str) -> int:
        deleted = 0
        for name in names:
            if self._alive(name):
                del self._data[name]
                self._expires_at.pop(name, None)
                deleted += 1
        return deleted

    def expire(self, name: str, seconds: int) -> bool:
        if not self._alive(name):
            return False
        self._expires_at[name] = self.now + seconds
        return True

    def ttl(self, name: str) -> int:
        if not self._alive(name):
            return -2
        if name not in self._expires_at:
            return -1
        return int(self._expires_at[name] - self.now)

    def keys(self, pattern: str = "*") -> list[str]:
        return [name for name in list(self._data) if self._alive(name) and fnmatch.fnmatch(name, pattern)]

    def pipeline(self) -> InMemoryPipeline:
        return InMemoryPipeline(self)

    def transaction(self, func, *watches: str, value_from_callable: bool = False, **kwargs: Any):
        """Same call shape as redis.Redis.transaction(); func raising aborts the write."""
        pipe = self.pipeline()
        try:
            if watches:
                pipe.watch(*watches)
            func_value = func(pipe)
            exec_value = pipe.execute()
            return func_value if value_from_callable else exec_value
        finally:
            pipe.reset()

    def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, message))
        return 0

    # -- strings -------------------------------------------------------

    def get(self, name: str) -> Optional[str]:
        if not self._alive(name):
            return None
        return self._data[name]

    def set(
        self,
        name: str,
        value: Any,
        ex: Optional[int] = None,
        nx: bool = False,
    ) -> Optional[bool]:
        if nx and self._alive(name):
            return None
        self._data[name] = str(value)
        if ex is not None:
            self._expires_at[name] = self.now + ex
        else:
            self._expires_at.pop(name, None)
        return True

    # -- lists ---------------------------------------------------------

    def _list(self, name: str) -> list[str]:
        if not self._alive(name):
            self._data[name] = []
        return self._data[name]

    def rpush(self, name: str, *values: Any) -> int:
        items = self._list(name)
        items.extend(str(value) for value in values)
        return len(items)

    def lpush(self, name: str, *values: Any) -> int:
        items = self._list(name)
        for value in values:
            items.insert(0, str(value))
        return len(items)

    def llen(self, name: str) -> int:
        return len(self._data[name]) if self._alive(name) else 0

    def lrange(self, name: str, start: int, end: int) -> list[str]:
        if not self._alive(name):
            return []
        items = self._data[name]
        size = len(items)
        if start < 0:
            start = max(size + start, 0)
        if end < 0:
            end = size + end
        end = min(end, size - 1)
        if start > end:
            return []
        return list(items[start : end + 1])

    def ltrim(self, name: str, start: int, end: int) -> bool:
        if self._alive(name):
            self._data[name] = self.lrange(name, start, end)
            if not self._data[name]:
                self.delete(name)
        return True

    def lrem(self, name: str, count: int, value: Any) -> int:
        if not self._alive(name):
            return 0
        value = str(value)
        items = self._data[name]
        positions = [i for i, item in enumerate(items) if item == value]
        if count < 0:
            positions = positions[::-1][: abs(count)]
        elif count > 0:
            positions = positions[:count]
        for index in sorted(positions, reverse=True):
            del items[index]
        if not items:
            self.delete(name)
        return len(positions)

    # -- hashes --------------------------------------------------------

    def hset(
        self,
        name: str,
        key: Optional[str] = None,
        value: Any = None,
        mapping: Optional[dict[str, Any]] = None,
    ) -> int:
        if not self._alive(name):
            self._data[name] = {}
        fields = dict(mapping or {})
        if key is not None:
            fields[key] = value
        added = sum(1 for field_name in fields if field_name not in self._data[name])
        self._data[name].update({k: str(v) for k, v in fields.items()})
        return added

    def hgetall(self, name: str) -> dict[str, str]:
        return dict(self._data[name]) if self._alive(name) else {}

    def hget(self, name: str, key: str) -> Optional[str]:
        return self.hgetall(name).get(key)

    def hdel(self, name: str, *keys: str) -> int:
        if not self._alive(name):
            return 0
        removed = sum(1 for key in keys if self._data[name].pop(key, None) is not None)
        if not self._data[name]:
            self.delete(name)
        return removed

    def hincrby(self, name: str, key: str, amount: int = 1) -> int:
        if not self._alive(name):
            self._data[name] = {}
        new_value = int(self._data[name].get(key, "0")) + amount
        self._data[name][key] = str(new_value)
        return new_value

    # -- sets ----------------------------------------------------------

    def sadd(self, name: str, *values: Any) -> int:
        if not self._alive(name):
            self._data[name] = set()
        before = len(self._data[name])
        self._data[name].update(str(value) for value in values)
        return len(self._data[name]) - before

    def smembers(self, name: str) -> set[str]:
        return set(self._data[name]) if self._alive(name) else set()


# ============================================================================
# COLLABORATOR DOUBLES
# ============================================================================


class FakeContextProvider:
    """Returns a fixed context; ids listed in missing_resume raise SubmissionContextError."""

    def __init__(self) -> None:
        self.missing_resume: set[str] = set()
        self.calls: list[str] = []

    def fetch_submission_context(self, application: Application) -> SubmissionContext:
        self.calls.append(application.id)
        if application.id in self.missing_resume:
            raise SubmissionContextError("Resume not found", application_id=application.id)
        return SubmissionContext(
            resume_bytes=b"%PDF-1.4 resume",
            applicant_info=ApplicantInfo(
                first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="555-0100"
            ),
            cover_letter=application.cover_letter,
        )


class ScriptedGateway:
    """
    Plays back outcomes in order; each is a SubmissionResult or an exception.

    When the script runs out, default is used (success unless overridden).
    """

    def __init__(self) -> None:
        self.outcomes: list[Any] = []
        self.default: Any = None
        self.calls: list[tuple[str, SubmissionPayload]] = []

    def submit_application(self, job_id: str, payload: SubmissionPayload) -> SubmissionResult:
        self.calls.append((job_id, payload))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if outcome is None:
            return SubmissionResult(success=True, confirmation_id=f"conf-{job_id}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, Notification]] = []
        self.error: Optional[Exception] = None

    def send_notification(self, user_id: str, notification: Notification) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((user_id, notification))

    def types(self) -> list[str]:
        return [notification.type.value for _, notification in self.sent]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    """Fresh in-memory Redis per test."""
    return InMemoryRedis()


@pytest.fixture
def queue(fake_redis) -> RedisApplicationQueue:
    return RedisApplicationQueue(client=fake_redis)


@pytest.fixture
def repository(fake_redis) -> RedisApplicationRepository:
    return RedisApplicationRepository(client=fake_redis)


@pytest.fixture
def service(repository, queue) -> AutoSenderService:
    return AutoSenderService(repository, queue)


@pytest.fixture
def context_provider() -> FakeContextProvider:
    return FakeContextProvider()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def worker_settings() -> WorkerSettings:
    """Three processing attempts, no in-cycle retries, no poll delay."""
    return WorkerSettings(
        max_retries=3,
        poll_interval_ms=0,
        submission_max_retries=0,
        submission_jitter_factor=0.0,
    )
