"""
Image endpoints.

POST /images/                  → Register an uploaded image (status pending)
POST /images/transform         → Queue a batch of images for one style
GET  /images/{image_id}        → Poll one image's status / result
GET  /users/{user_id}/images   → A user's history, newest first

The API layer is intentionally thin:
- Validate input (Pydantic does this automatically)
- Talk to the store / enqueue on the task queue
- Return the response

It does NOT call the AI service. Workers do that in the background, and
callers learn the outcome by polling GET /images/{id}.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_store, get_styles, get_task_queue
from api.schemas.image import (
    ImageCreate,
    ImageResponse,
    StyleResponse,
    TransformRequest,
    TransformResponse,
)
from api.schemas.queue import QueueStatusResponse
from common.styles import StyleCatalog
from scheduler.engine import TaskQueue
from store.base import AbstractJobStore

router = APIRouter(tags=["images"])


@router.post("/images/", response_model=ImageResponse, status_code=201)
def create_image(
    image_in: ImageCreate,
    store: AbstractJobStore = Depends(get_store),
    styles: StyleCatalog = Depends(get_styles),
) -> ImageResponse:
    if styles.get(image_in.style) is None:
        raise HTTPException(status_code=400, detail=f"Style '{image_in.style}' not found")

    image = store.create_image(image_in.user_id, image_in.original_url, image_in.style)
    return ImageResponse.model_validate(image)


@router.post("/images/transform", response_model=TransformResponse, status_code=202)
def transform_images(
    request: TransformRequest,
    store: AbstractJobStore = Depends(get_store),
    styles: StyleCatalog = Depends(get_styles),
    task_queue: TaskQueue = Depends(get_task_queue),
) -> TransformResponse:
    """
    Queue every image in the request for transformation.

    All ids are checked BEFORE anything is queued, so a bad id rejects the
    whole batch instead of leaving it half-submitted. Returns 202: the work
    happens in the background.
    """
    if styles.get(request.style) is None:
        raise HTTPException(status_code=400, detail=f"Style '{request.style}' not found")

    for image_id in request.image_ids:
        image = store.get_image(image_id)
        if image is None or image.user_id != request.user_id:
            raise HTTPException(status_code=404, detail=f"Image {image_id} not found")

    job_ids = task_queue.enqueue_many(
        request.image_ids, request.style, request.user_id, request.priority
    )
    return TransformResponse(
        job_ids=job_ids,
        image_ids=request.image_ids,
        queue=QueueStatusResponse.model_validate(task_queue.get_status()),
    )


@router.get("/images/{image_id}", response_model=ImageResponse)
def get_image(
    image_id: int,
    store: AbstractJobStore = Depends(get_store),
) -> ImageResponse:
    image = store.get_image(image_id)
    if image is None:
        raise HTTPException(status_code=404, detail=f"Image {image_id} not found")
    return ImageResponse.model_validate(image)


@router.get("/users/{user_id}/images", response_model=list[ImageResponse])
def list_user_images(
    user_id: int,
    store: AbstractJobStore = Depends(get_store),
) -> list[ImageResponse]:
    return [ImageResponse.model_validate(img) for img in store.list_user_images(user_id)]


@router.get("/styles/", response_model=list[StyleResponse], tags=["styles"])
def list_styles(styles: StyleCatalog = Depends(get_styles)) -> list[StyleResponse]:
    return [StyleResponse.model_validate(s) for s in styles.all()]
