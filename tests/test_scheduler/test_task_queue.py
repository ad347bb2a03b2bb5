"""
Tests for the TaskQueue.

These drive the real queue and the real worker against an in-memory store and
FakeTransformClient. Timing is controlled with gates (threading.Event): a
gated job holds its slot until the test releases it, so "what is pending vs
in flight" is deterministic.
"""

import threading

import pytest

from conftest import STYLE, image_bytes, make_image
from common.errors import TransformationTimeoutError
from models.enums import ImageStatus
from scheduler.engine import QueueStatus, TaskQueue


def test_serial_end_to_end(store, fake_client, make_queue):
    """3 jobs, max_concurrent=1: one in flight at a time, all end terminal."""
    queue = make_queue(max_concurrent=1)
    images = [make_image(store, str(i)) for i in range(3)]
    gate = fake_client.block("0")

    for img in images:
        queue.enqueue(img.id, STYLE, user_id=1)

    status = queue.get_status()
    assert status.pending_count in (2, 3)
    assert status.current_processing <= 1
    assert status.is_processing is True

    gate.set()
    assert queue.wait_until_idle(timeout=5)

    for img in images:
        assert store.get_image(img.id).status.is_terminal
    assert queue.get_status() == QueueStatus(
        pending_count=0, is_processing=False, current_processing=0
    )
    assert fake_client.peak == 1


def test_current_processing_never_exceeds_cap(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=3)
    samples: list[int] = []
    fake_client.delay = 0.01
    fake_client.on_call = lambda _: samples.append(queue.get_status().current_processing)

    images = [make_image(store, str(i)) for i in range(20)]
    for img in images:
        queue.enqueue(img.id, STYLE, user_id=1)

    assert queue.wait_until_idle(timeout=10)
    assert len(fake_client.calls) == 20
    assert fake_client.peak <= 3
    assert max(samples) <= 3
    assert all(store.get_image(img.id).status == ImageStatus.COMPLETED for img in images)


def test_parallel_mode_admits_whole_batch_at_once(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=100)
    gate = threading.Event()
    images = [make_image(store, str(i)) for i in range(5)]
    for i in range(5):
        fake_client.gates[image_bytes(str(i))] = gate

    queue.enqueue_many([img.id for img in images], STYLE, user_id=1)

    status = queue.get_status()
    assert status.pending_count == 0
    assert status.current_processing == 5

    gate.set()
    assert queue.wait_until_idle(timeout=5)


def test_equal_priority_admitted_in_submission_order(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=1)
    blocker = make_image(store, "blocker")
    gate = fake_client.block("blocker")
    queue.enqueue(blocker.id, STYLE, user_id=1)

    for label in ("a", "b", "c"):
        queue.enqueue(make_image(store, label).id, STYLE, user_id=1)
    gate.set()

    assert queue.wait_until_idle(timeout=5)
    assert fake_client.calls == [image_bytes(x) for x in ("blocker", "a", "b", "c")]


def test_higher_priority_admitted_first(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=1)
    blocker = make_image(store, "blocker")
    gate = fake_client.block("blocker")
    queue.enqueue(blocker.id, STYLE, user_id=1)

    queue.enqueue(make_image(store, "a").id, STYLE, user_id=1, priority=0)
    queue.enqueue(make_image(store, "b").id, STYLE, user_id=1, priority=5)
    gate.set()

    assert queue.wait_until_idle(timeout=5)
    assert fake_client.calls == [image_bytes(x) for x in ("blocker", "b", "a")]


def test_failing_job_does_not_affect_sibling(store, fake_client, make_queue):
    """A's client call blows up; B in the same batch still completes."""
    queue = make_queue(max_concurrent=2)
    a = make_image(store, "a")
    b = make_image(store, "b")
    fake_client.responses[image_bytes("a")] = TransformationTimeoutError("read timed out")

    queue.enqueue_many([a.id, b.id], STYLE, user_id=1)

    assert queue.wait_until_idle(timeout=5)
    assert store.get_image(a.id).status == ImageStatus.FAILED
    assert store.get_image(b.id).status == ImageStatus.COMPLETED
    assert queue.get_status().current_processing == 0


class _ExplodingWorker:
    """Worker that breaks the never-raise contract for one image."""

    def __init__(self, inner, bad_image_id: int):
        self.inner = inner
        self.bad_image_id = bad_image_id

    def run(self, job):
        if job.image_id == self.bad_image_id:
            raise RuntimeError("worker bug")
        self.inner.run(job)


def test_worker_exception_is_contained(store, worker, make_queue):
    """Even if run() itself raises, the batch settles and both slots are freed."""
    a = make_image(store, "a")
    b = make_image(store, "b")
    queue = make_queue(max_concurrent=2, queue_worker=_ExplodingWorker(worker, a.id))

    queue.enqueue_many([a.id, b.id], STYLE, user_id=1)

    assert queue.wait_until_idle(timeout=5)
    assert store.get_image(b.id).status == ImageStatus.COMPLETED
    assert queue.get_status() == QueueStatus(0, False, 0)

    # Queue keeps working afterwards
    c = make_image(store, "c")
    queue.enqueue(c.id, STYLE, user_id=1)
    assert queue.wait_until_idle(timeout=5)
    assert store.get_image(c.id).status == ImageStatus.COMPLETED


def test_missing_image_is_dropped(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=1)
    queue.enqueue(9999, STYLE, user_id=1)

    assert queue.wait_until_idle(timeout=5)
    assert fake_client.calls == []
    assert queue.get_status().is_processing is False


def test_job_ids_are_monotonic(store, make_queue):
    queue = make_queue(max_concurrent=1)
    images = [make_image(store, str(i)) for i in range(3)]

    first = queue.enqueue(images[0].id, STYLE, user_id=1)
    rest = queue.enqueue_many([images[1].id, images[2].id], STYLE, user_id=1)

    assert rest == [first + 1, first + 2]


def test_clear_drops_pending_but_not_in_flight(store, fake_client, make_queue):
    queue = make_queue(max_concurrent=1)
    running = make_image(store, "running")
    gate = fake_client.block("running")
    queue.enqueue(running.id, STYLE, user_id=1)
    waiting = [make_image(store, str(i)) for i in range(3)]
    queue.enqueue_many([img.id for img in waiting], STYLE, user_id=1)

    assert queue.clear() == 3
    assert queue.get_status().pending_count == 0
    assert queue.get_status().is_processing is True

    gate.set()
    assert queue.wait_until_idle(timeout=5)
    assert store.get_image(running.id).status == ImageStatus.COMPLETED
    assert all(store.get_image(img.id).status == ImageStatus.PENDING for img in waiting)


def test_enqueue_after_shutdown_raises(store, worker):
    queue = TaskQueue(worker, max_concurrent=1)
    queue.shutdown()

    with pytest.raises(RuntimeError, match="shut down"):
        queue.enqueue(make_image(store, "late").id, STYLE, user_id=1)


def test_shutdown_waits_for_pending_jobs(store, worker):
    queue = TaskQueue(worker, max_concurrent=1)
    images = [make_image(store, str(i)) for i in range(3)]
    queue.enqueue_many([img.id for img in images], STYLE, user_id=1)

    queue.shutdown(wait=True)

    assert all(store.get_image(img.id).status == ImageStatus.COMPLETED for img in images)


def test_rejects_non_positive_cap(worker):
    with pytest.raises(ValueError):
        TaskQueue(worker, max_concurrent=0)


def test_status_of_fresh_queue(make_queue):
    assert make_queue().get_status() == QueueStatus(0, False, 0)


def test_resubmitted_image_is_not_reprocessed(store, fake_client, make_queue):
    """No dedup in the queue, but a finished image is left alone by the worker."""
    queue = make_queue(max_concurrent=1)
    img = make_image(store, "once")

    queue.enqueue(img.id, STYLE, user_id=1)
    assert queue.wait_until_idle(timeout=5)
    queue.enqueue(img.id, STYLE, user_id=1)
    assert queue.wait_until_idle(timeout=5)

    assert fake_client.calls == [image_bytes("once")]
    assert store.get_image(img.id).status == ImageStatus.COMPLETED
