"""
Tests for the priority-then-FIFO pending buffer.

HIGHER priority numbers come out first. Ties are broken by created_at, then
by job id (submission order).
"""

from datetime import datetime, timedelta, timezone

from scheduler.priority import PriorityScheduler
from scheduler.base import TransformJob

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _make_job(job_id: int, priority: int = 0, offset: float = 0.0) -> TransformJob:
    return TransformJob(
        id=job_id,
        image_id=job_id * 10,
        style="Watercolor Art",
        user_id=1,
        priority=priority,
        created_at=T0 + timedelta(seconds=offset),
    )


def test_dequeues_highest_priority_first():
    scheduler = PriorityScheduler()
    scheduler.enqueue(_make_job(1, priority=0))
    scheduler.enqueue(_make_job(2, priority=5))
    scheduler.enqueue(_make_job(3, priority=2))

    assert scheduler.dequeue().id == 2
    assert scheduler.dequeue().id == 3
    assert scheduler.dequeue().id == 1


def test_equal_priority_is_fifo_by_created_at():
    """Created-at order wins even when jobs are enqueued out of order."""
    scheduler = PriorityScheduler()
    scheduler.enqueue(_make_job(3, offset=2))
    scheduler.enqueue(_make_job(1, offset=0))
    scheduler.enqueue(_make_job(2, offset=1))

    assert [scheduler.dequeue().id for _ in range(3)] == [1, 2, 3]


def test_identical_timestamps_fall_back_to_job_id():
    scheduler = PriorityScheduler()
    for job_id in (4, 2, 3, 1):
        scheduler.enqueue(_make_job(job_id))

    assert [scheduler.dequeue().id for _ in range(4)] == [1, 2, 3, 4]


def test_priority_beats_creation_order():
    """A later, higher-priority job jumps ahead of an earlier default one."""
    scheduler = PriorityScheduler()
    scheduler.enqueue(_make_job(1, priority=0, offset=0))
    scheduler.enqueue(_make_job(2, priority=5, offset=1))

    assert scheduler.dequeue().id == 2


def test_dequeue_from_empty_returns_none():
    assert PriorityScheduler().dequeue() is None


def test_peek_returns_next_without_removing():
    scheduler = PriorityScheduler()
    scheduler.enqueue(_make_job(1, priority=0))
    scheduler.enqueue(_make_job(2, priority=9))

    assert scheduler.peek().id == 2
    assert scheduler.peek().id == 2
    assert scheduler.size() == 2


def test_clear_drops_everything_and_reports_count():
    scheduler = PriorityScheduler()
    for job_id in range(1, 4):
        scheduler.enqueue(_make_job(job_id))

    assert scheduler.clear() == 3
    assert scheduler.size() == 0
    assert scheduler.dequeue() is None
