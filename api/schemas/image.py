"""
Pydantic schemas for the /images and /styles endpoints.

These are NOT database models. They define the HTTP API contract:
- ImageCreate: register an uploaded image (request body)
- ImageResponse: one image and its transformation outcome
- TransformRequest / TransformResponse: submit a batch of images for one style
- StyleResponse: one entry of the style catalog
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from api.schemas.queue import QueueStatusResponse
from models.enums import ImageStatus
from config.settings import settings


class ImageCreate(BaseModel):
    """Request body for POST /images/."""

    user_id: int = Field(..., ge=1)
    original_url: str = Field(
        ...,
        min_length=1,
        description="The input image as a data URL (data:image/...;base64,...)",
    )
    style: str = Field(..., min_length=1, examples=["Watercolor Art"])


class ImageResponse(BaseModel):
    """Response body for a single image: GET /images/{id}, POST /images/."""

    id: int
    user_id: int
    style: str
    status: ImageStatus
    transformed_url: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime

    # from_attributes=True lets Pydantic read an ImageRecord dataclass directly
    model_config = {"from_attributes": True}


class TransformRequest(BaseModel):
    """Request body for POST /images/transform."""

    user_id: int = Field(..., ge=1)
    style: str = Field(..., min_length=1)
    image_ids: list[int] = Field(..., min_length=1, max_length=settings.MAX_BATCH_SIZE)
    priority: int = Field(default=0, description="Higher runs first")


class TransformResponse(BaseModel):
    """Response body for POST /images/transform."""

    job_ids: list[int]
    image_ids: list[int]
    queue: QueueStatusResponse


class StyleResponse(BaseModel):
    name: str
    description: str
    point_cost: int

    model_config = {"from_attributes": True}
