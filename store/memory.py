"""
In-memory job store.

A dict of ImageRecord keyed by id, guarded by one lock. Records are replaced,
never mutated in place, so a caller holding an old ImageRecord keeps seeing a
consistent snapshot while a worker moves the image forward.

Everything is lost when the process exits. Fine for development and tests,
use STORE_BACKEND=sql for anything longer-lived.
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from models.enums import ImageStatus
from models.image import ImageRecord
from store.base import AbstractJobStore, validate_update


class InMemoryJobStore(AbstractJobStore):

    def __init__(self):
        self._images: dict[int, ImageRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_image(self, user_id: int, original_url: str, style: str) -> ImageRecord:
        with self._lock:
            image = ImageRecord(
                id=next(self._ids),
                user_id=user_id,
                original_url=original_url,
                style=style,
                status=ImageStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            self._images[image.id] = image
            return image

    def get_image(self, image_id: int) -> Optional[ImageRecord]:
        return self._images.get(image_id)

    def list_user_images(self, user_id: int) -> list[ImageRecord]:
        with self._lock:
            owned = [img for img in self._images.values() if img.user_id == user_id]
        # id breaks ties between images created within the same clock tick
        return sorted(owned, key=lambda img: (img.created_at, img.id), reverse=True)

    def update_image_status(
        self,
        image_id: int,
        status: ImageStatus,
        transformed_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[ImageRecord]:
        with self._lock:
            image = self._images.get(image_id)
            if image is None:
                return None

            validate_update(image_id, image.status, status, transformed_url, error_message)

            changes: dict = {"status": status}
            if transformed_url:
                changes["transformed_url"] = transformed_url
            if error_message:
                changes["error_message"] = error_message

            updated = replace(image, **changes)
            self._images[image_id] = updated
            return updated
