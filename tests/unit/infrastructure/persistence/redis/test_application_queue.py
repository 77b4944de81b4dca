"""
Tests for RedisApplicationQueue.

Covers:
- FIFO without contention
- Per-user mutual exclusion and scan-past of busy users
- Lock round trip (release makes the user eligible again)
- Lease expiry (TTL)
- requeue / remove_from_queue / malformed entries
- Item lock contention (SET NX)
- User lock taken between the check and the claim
"""

import json
from unittest.mock import patch

import pytest

from src.domain.applications.value_objects.queue_item import QueueItem
from src.infrastructure.persistence.redis.application_queue import RedisApplicationQueue


# ============================================================================
# HELPERS
# ============================================================================


def make_item(application_id: str, user_id: str = "user-1") -> QueueItem:
    return QueueItem(
        application_id=application_id,
        user_id=user_id,
        job_id=f"job-{application_id}",
        resume_id="resume-1",
    )


def drain(queue: RedisApplicationQueue) -> list[str]:
    """Dequeue and release until empty; returns application ids in claim order."""
    claimed = []
    while (item := queue.dequeue()) is not None:
        claimed.append(item.application_id)
        queue.release_lock(item.application_id, item.user_id)
    return claimed


# ============================================================================
# CONFIGURATION
# ============================================================================


def test_keys_and_defaults(fake_redis):
    queue = RedisApplicationQueue(client=fake_redis)

    assert queue.QUEUE_KEY == "queue:applications"
    assert queue._get_item_lock_key("a1") == "queue:processing:a1"
    assert queue._get_user_lock_key("u1") == "queue:user_processing:u1"
    assert queue.lock_ttl_seconds == 300
    assert queue.scan_window == 10


@pytest.mark.parametrize("kwargs", [{"lock_ttl_seconds": 0}, {"scan_window": 0}])
def test_rejects_invalid_configuration(fake_redis, kwargs):
    with pytest.raises(ValueError):
        RedisApplicationQueue(client=fake_redis, **kwargs)


# ============================================================================
# ENQUEUE
# ============================================================================


def test_enqueue_batch_appends_in_order(queue, fake_redis):
    queue.enqueue(make_item("a0"))
    queue.enqueue_batch([make_item("a1"), make_item("a2")])

    assert queue.get_queue_length() == 3
    assert [i.application_id for i in queue.get_queue_items()] == ["a0", "a1", "a2"]


def test_enqueue_batch_empty_is_noop(queue, fake_redis):
    queue.enqueue_batch([])
    assert fake_redis.exists(queue.QUEUE_KEY) == 0


def test_enqueue_does_not_deduplicate(queue):
    item = make_item("a1")
    queue.enqueue(item)
    queue.enqueue(item)
    assert queue.get_queue_length() == 2


# ============================================================================
# DEQUEUE
# ============================================================================


def test_fifo_for_distinct_users(queue):
    queue.enqueue_batch([make_item(f"a{i}", user_id=f"user-{i}") for i in range(5)])

    assert drain(queue) == ["a0", "a1", "a2", "a3", "a4"]


def test_fifo_for_one_user_when_locks_released(queue):
    queue.enqueue_batch([make_item(f"a{i}") for i in range(4)])

    assert drain(queue) == ["a0", "a1", "a2", "a3"]


def test_dequeue_empty_returns_none(queue):
    assert queue.dequeue() is None


def test_dequeue_sets_both_locks_and_removes_entry(queue, fake_redis):
    queue.enqueue(make_item("a1", user_id="u1"))

    item = queue.dequeue()

    assert item.application_id == "a1"
    assert queue.is_processing("a1")
    assert queue.is_user_processing("u1")
    assert fake_redis.get("queue:user_processing:u1") == "a1"
    assert fake_redis.ttl("queue:processing:a1") == 300
    assert queue.get_queue_length() == 0


def test_user_lock_blocks_second_item_of_same_user(queue):
    queue.enqueue_batch([make_item("a1", "u1"), make_item("a2", "u1")])

    first = queue.dequeue()

    assert first.application_id == "a1"
    assert queue.dequeue() is None
    assert queue.get_queue_length() == 1


def test_busy_user_is_skipped_not_waited_for(queue):
    queue.enqueue_batch(
        [make_item("a1", "u1"), make_item("a2", "u1"), make_item("b1", "u2")]
    )

    assert queue.dequeue().application_id == "a1"
    assert queue.dequeue().application_id == "b1"
    assert queue.dequeue() is None


def test_release_lock_makes_user_eligible_again(queue):
    queue.enqueue_batch([make_item("a1", "u1"), make_item("a2", "u1")])

    first = queue.dequeue()
    queue.release_lock(first.application_id, first.user_id)

    assert not queue.is_processing("a1")
    assert not queue.is_user_processing("u1")
    assert queue.dequeue().application_id == "a2"


def test_release_lock_is_idempotent(queue):
    queue.release_lock("missing", "nobody")
    queue.release_lock("missing", "nobody")


def test_held_item_lock_skips_entry(queue, fake_redis):
    """Another worker holds the item lock (duplicate entry of a claimed item)."""
    queue.enqueue_batch([make_item("a1", "u1"), make_item("b1", "u2")])
    fake_redis.set("queue:processing:a1", "1", ex=300)

    assert queue.dequeue().application_id == "b1"
    assert queue.get_queue_length() == 1


def test_user_lock_taken_after_check_releases_item_lock(queue, fake_redis):
    """Another worker claims the user's lock between the GET and the SET."""
    queue.enqueue(make_item("a1", "u1"))
    fake_redis.set("queue:user_processing:u1", "other-app", ex=300)

    # GET reports the user as free, so only SET NX can catch the holder
    with patch.object(fake_redis, "get", return_value=None):
        assert queue.dequeue() is None

    assert fake_redis.get("queue:user_processing:u1") == "other-app"
    assert not queue.is_processing("a1")
    assert [i.application_id for i in queue.get_queue_items()] == ["a1"]


def test_scan_window_limits_candidates(fake_redis):
    queue = RedisApplicationQueue(client=fake_redis, scan_window=2)
    queue.enqueue_batch([make_item("a1", "u1"), make_item("a2", "u1"), make_item("b1", "u2")])
    fake_redis.set("queue:user_processing:u1", "other", ex=300)

    # b1 sits outside the window
    assert queue.dequeue() is None


def test_malformed_entries_are_skipped(queue, fake_redis):
    fake_redis.rpush(queue.QUEUE_KEY, "not json", json.dumps({"application_id": "x"}))
    queue.enqueue(make_item("a1"))

    assert queue.dequeue().application_id == "a1"
    assert queue.get_queue_items() == []
    assert queue.get_queue_length() == 2


# ============================================================================
# LEASE EXPIRY
# ============================================================================


def test_locks_expire_after_ttl(fake_redis):
    queue = RedisApplicationQueue(client=fake_redis, lock_ttl_seconds=30)
    queue.enqueue_batch([make_item("a1", "u1"), make_item("a2", "u1")])
    queue.dequeue()

    fake_redis.advance(29)
    assert queue.dequeue() is None

    fake_redis.advance(1)
    assert not queue.is_processing("a1")
    assert queue.dequeue().application_id == "a2"


# ============================================================================
# REQUEUE / REMOVE
# ============================================================================


def test_requeue_releases_locks_and_appends_to_tail(queue):
    queue.enqueue_batch([make_item("a1", "u1"), make_item("b1", "u2")])
    claimed = queue.dequeue()

    queue.requeue(claimed)

    assert not queue.is_processing("a1")
    assert not queue.is_user_processing("u1")
    items = queue.get_queue_items()
    assert [i.application_id for i in items] == ["b1", "a1"]
    assert items[-1].queued_at >= claimed.queued_at


def test_remove_from_queue(queue):
    queue.enqueue_batch([make_item("a1"), make_item("a2"), make_item("a3")])

    assert queue.remove_from_queue("a2") is True
    assert queue.remove_from_queue("a2") is False
    assert [i.application_id for i in queue.get_queue_items()] == ["a1", "a3"]


def test_get_queue_items_range(queue):
    queue.enqueue_batch([make_item(f"a{i}") for i in range(5)])

    assert [i.application_id for i in queue.get_queue_items(1, 2)] == ["a1", "a2"]
    assert [i.application_id for i in queue.get_queue_items(-2, -1)] == ["a3", "a4"]
