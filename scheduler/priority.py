"""
Priority-then-FIFO pending buffer.

Jobs with the HIGHEST priority number run first. Among equal priorities the
earliest created_at wins, and the job id (assigned monotonically) breaks any
remaining tie, so two jobs created within the same clock tick still come out
in submission order.

Data structure: min-heap keyed on (-priority, created_at, id)
- enqueue: heappush → O(log n)
- dequeue: heappop  → O(log n)

The heap key is exactly the order a full sort by "priority desc, created_at
asc" would give, without re-sorting the whole list on every scheduling pass.

Not thread-safe on its own; TaskQueue calls it under its admission lock.
"""

import heapq
from datetime import datetime
from typing import Optional

from scheduler.base import AbstractScheduler, TransformJob


class PriorityScheduler(AbstractScheduler):

    def __init__(self):
        self._heap: list[tuple[int, datetime, int, TransformJob]] = []

    def enqueue(self, job: TransformJob) -> None:
        heapq.heappush(self._heap, (-job.priority, job.created_at, job.id, job))

    def dequeue(self) -> Optional[TransformJob]:
        if self._heap:
            return heapq.heappop(self._heap)[3]
        return None

    def peek(self) -> Optional[TransformJob]:
        return self._heap[0][3] if self._heap else None

    def size(self) -> int:
        return len(self._heap)

    def clear(self) -> int:
        dropped = len(self._heap)
        self._heap.clear()
        return dropped
