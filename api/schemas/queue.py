"""
Pydantic schemas for the /queue endpoints.

QueueStatusResponse mirrors TaskQueue.get_status(); clients poll it (every few
seconds) to render a progress bar.
"""

from pydantic import BaseModel


class QueueStatusResponse(BaseModel):
    """Response body for GET /queue/status."""

    pending_count: int        # jobs waiting for a free slot
    is_processing: bool       # anything pending or in flight
    current_processing: int   # jobs currently in flight (<= max concurrent)

    model_config = {"from_attributes": True}


class QueueClearResponse(BaseModel):
    cleared: int
