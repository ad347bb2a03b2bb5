"""
Task queue — admits transformation jobs under a concurrency cap.

This is the core orchestrator. It owns:
- the pending buffer (priority, then FIFO, see scheduler/priority.py)
- the in-flight counter, never above max_concurrent
- a thread pool that runs TransformationWorker.run() for admitted jobs

Every trigger (an enqueue, or a batch finishing) runs one scheduling pass:

    1. Take the admission lock
    2. slots = max_concurrent - current_processing
    3. Pop up to `slots` jobs in priority/FIFO order, add them to the counter
    4. Release the lock, submit each job to the thread pool
    5. A coordinator thread waits for the WHOLE batch to settle
       (concurrent.futures.wait, ALL_COMPLETED, never fail-fast),
       then decrements the counter and runs another pass

         enqueue()                    ThreadPoolExecutor
    ┌──────────────┐  admit    ┌─────────────────────────────┐
    │ pending heap │─────────> │ worker │ worker │ ... │ (cap) │
    └──────────────┘           └──────────────┬──────────────┘
           ▲                                  │ batch settled
           └──────────── next pass ───────────┘

Steps 2-3 are the only read-modify-write of shared state, and they happen
under one lock, so two overlapping triggers can never both see the same free
slots and over-admit. Workers run unsynchronized against each other: each
one touches only its own Image row.

Workers never raise (TransformationWorker swallows and records every error),
so the coordinator only ever sees "settled". If something does slip through,
it is logged and the counter is still decremented.

Two deployment modes, same code:
    max_concurrent=1    strictly serial, one job at a time
    max_concurrent=100  throughput mode
"""

import itertools
import logging
import threading
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Iterable, Optional

from scheduler.base import AbstractScheduler, TransformJob
from scheduler.priority import PriorityScheduler
from worker.executor import TransformationWorker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueStatus:
    pending_count: int
    is_processing: bool
    current_processing: int


class TaskQueue:

    def __init__(
        self,
        worker: TransformationWorker,
        max_concurrent: int,
        scheduler: Optional[AbstractScheduler] = None,
    ):
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")

        self.max_concurrent = max_concurrent
        self._worker = worker
        self._pending = scheduler or PriorityScheduler()
        self._executor = ThreadPoolExecutor(
            max_workers=max_concurrent,
            thread_name_prefix="transform-worker",
        )

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._job_ids = itertools.count(1)
        self._current_processing = 0
        self._is_processing = False
        self._closed = False

    # ── Public API ──────────────────────────────────────────────

    def enqueue(self, image_id: int, style: str, user_id: int, priority: int = 0) -> int:
        """
        Add one job and trigger a scheduling pass. Never blocks on job execution.

        Returns the new job's id. No deduplication: enqueueing the same image
        twice creates two jobs.
        """
        return self.enqueue_many([image_id], style, user_id, priority)[0]

    def enqueue_many(
        self, image_ids: Iterable[int], style: str, user_id: int, priority: int = 0
    ) -> list[int]:
        """Add one job per image id, then run a single scheduling pass."""
        with self._lock:
            if self._closed:
                raise RuntimeError("TaskQueue has been shut down")

            jobs = []
            for image_id in image_ids:
                job = TransformJob(
                    id=next(self._job_ids),
                    image_id=image_id,
                    style=style,
                    user_id=user_id,
                    priority=priority,
                )
                self._pending.enqueue(job)
                jobs.append(job)
                logger.info(
                    f"Queued job {job.id}: image {image_id}, style '{style}', "
                    f"priority {priority}"
                )
            logger.info(f"Pending jobs: {self._pending.size()}")

        self._schedule()
        return [job.id for job in jobs]

    def get_status(self) -> QueueStatus:
        """Instantaneous snapshot for progress polling. No side effects."""
        with self._lock:
            return QueueStatus(
                pending_count=self._pending.size(),
                is_processing=self._is_processing,
                current_processing=self._current_processing,
            )

    def clear(self) -> int:
        """Drop every pending job. In-flight jobs keep running. Returns the number dropped."""
        with self._lock:
            dropped = self._pending.clear()
            self._update_idle_locked()
        logger.info(f"Cleared {dropped} pending jobs")
        return dropped

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until nothing is pending or in flight. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(
                lambda: self._pending.size() == 0 and self._current_processing == 0,
                timeout=timeout,
            )

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting jobs.

        wait=True lets pending and in-flight jobs finish first.
        wait=False drops pending jobs; in-flight ones still run to completion
        in the background, their Images reach a terminal status as usual.
        """
        with self._lock:
            self._closed = True
            if not wait:
                dropped = self._pending.clear()
                if dropped:
                    logger.warning(f"Shutdown dropped {dropped} pending jobs")
                self._update_idle_locked()

        if wait:
            self.wait_until_idle()
        self._executor.shutdown(wait=wait)
        logger.info("Task queue stopped")

    # ── Scheduling ──────────────────────────────────────────────

    def _schedule(self) -> None:
        with self._lock:
            batch = self._admit_locked()
        if batch:
            self._dispatch(batch)

    def _admit_locked(self) -> list[TransformJob]:
        """Pop as many jobs as there are free slots. Caller must hold self._lock."""
        if self._pending.size() == 0:
            self._update_idle_locked()
            return []

        self._is_processing = True
        slots = max(0, self.max_concurrent - self._current_processing)

        batch: list[TransformJob] = []
        while len(batch) < slots and (job := self._pending.dequeue()) is not None:
            batch.append(job)

        self._current_processing += len(batch)
        return batch

    def _update_idle_locked(self) -> None:
        if self._pending.size() == 0 and self._current_processing == 0:
            self._is_processing = False
            self._idle.notify_all()

    def _dispatch(self, batch: list[TransformJob]) -> None:
        logger.info(
            f"Dispatching {len(batch)} jobs "
            f"(in flight: {self._current_processing}, max: {self.max_concurrent})"
        )
        futures: dict[Future, TransformJob] = {}
        for job in batch:
            try:
                futures[self._executor.submit(self._worker.run, job)] = job
            except RuntimeError:
                # shutdown(wait=False) raced with this pass; the pool is gone
                logger.error(f"Executor closed, dropping job {job.id} (image {job.image_id})")

        unsubmitted = len(batch) - len(futures)
        if unsubmitted:
            with self._lock:
                self._current_processing -= unsubmitted
                self._update_idle_locked()
        if not futures:
            return

        # The coordinator joins the batch so enqueue() returns immediately
        coordinator = threading.Thread(
            target=self._settle_batch,
            args=(futures,),
            name=f"batch-{next(iter(futures.values())).id}",
            daemon=True,
        )
        coordinator.start()

    def _settle_batch(self, futures: dict[Future, TransformJob]) -> None:
        wait(futures, return_when=ALL_COMPLETED)

        for future, job in futures.items():
            exc = future.exception()
            if exc is not None:
                logger.error(
                    f"Worker for job {job.id} (image {job.image_id}) raised: {exc}",
                    exc_info=exc,
                )

        with self._lock:
            self._current_processing -= len(futures)
            batch = self._admit_locked()

        logger.debug(f"Batch of {len(futures)} settled, admitting {len(batch)} more")
        if batch:
            self._dispatch(batch)
