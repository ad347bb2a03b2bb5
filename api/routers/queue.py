"""
Task queue endpoints.

GET    /queue/status   → Snapshot of pending / in-flight counts
DELETE /queue/pending  → Drop every job still waiting for a slot

Status is cheap and side-effect free, so clients can poll it every few
seconds. Clearing does not touch in-flight jobs, and the cleared jobs' images
stay in `pending` (nothing ever picked them up).
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_task_queue
from api.schemas.queue import QueueClearResponse, QueueStatusResponse
from scheduler.engine import TaskQueue

router = APIRouter(prefix="/queue", tags=["queue"])


@router.get("/status", response_model=QueueStatusResponse)
async def get_queue_status(
    task_queue: TaskQueue = Depends(get_task_queue),
) -> QueueStatusResponse:
    return QueueStatusResponse.model_validate(task_queue.get_status())


@router.delete("/pending", response_model=QueueClearResponse)
async def clear_pending_jobs(
    task_queue: TaskQueue = Depends(get_task_queue),
) -> QueueClearResponse:
    return QueueClearResponse(cleared=task_queue.clear())
