"""
Job DTO and the pending-buffer interface.

TransformJob is a lightweight data transfer object: just the fields the
queue needs to order and dispatch work. It does NOT hold the Image record:
the worker looks that up from the store when the job actually runs, so a job
sitting in the queue never pins a multi-megabyte data URL in memory.

A job exists only while it is pending or in flight. Once its worker returns
(success or failure) it is simply dropped; the Image row is the only thing
that persists.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class TransformJob:
    id: int                    # assigned by the queue, monotonically increasing
    image_id: int
    style: str
    user_id: int
    priority: int = 0          # higher runs first
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AbstractScheduler(ABC):
    """
    Ordering policy for pending jobs.

    - enqueue: add a job
    - dequeue: remove and return the next job, or None if empty
    - peek: look at the next job without removing it
    - size: how many jobs are waiting
    - clear: drop everything, return how many were dropped
    """

    @abstractmethod
    def enqueue(self, job: TransformJob) -> None:
        ...

    @abstractmethod
    def dequeue(self) -> Optional[TransformJob]:
        ...

    @abstractmethod
    def peek(self) -> Optional[TransformJob]:
        ...

    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def clear(self) -> int:
        ...
