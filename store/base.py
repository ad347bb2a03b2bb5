"""
Abstract job store (Repository pattern).

The pipeline never talks to a database directly; it calls these four
methods. Swap InMemoryJobStore for SqlJobStore (or anything else) without
touching the worker or the queue.

Thread safety contract:
- Workers call update_image_status() from many threads at once, but each
  worker only ever touches its own image row. Implementations must make
  concurrent updates to DIFFERENT rows safe; no cross-row locking is needed.

The status checks shared by every backend live in validate_update() so the
state machine is enforced identically everywhere.
"""

from abc import ABC, abstractmethod
from typing import Optional

from common.errors import InvalidStatusTransitionError
from models.enums import ImageStatus
from models.image import ImageRecord


class AbstractJobStore(ABC):

    @abstractmethod
    def create_image(self, user_id: int, original_url: str, style: str) -> ImageRecord:
        """Insert a new image in status `pending` and return it."""
        ...

    @abstractmethod
    def get_image(self, image_id: int) -> Optional[ImageRecord]:
        """Return the image, or None if no such id exists."""
        ...

    @abstractmethod
    def list_user_images(self, user_id: int) -> list[ImageRecord]:
        """All images owned by `user_id`, newest first."""
        ...

    @abstractmethod
    def update_image_status(
        self,
        image_id: int,
        status: ImageStatus,
        transformed_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[ImageRecord]:
        """
        Move an image to `status`.

        Returns:
            the updated image, or None if the id does not exist.

        Raises:
            InvalidStatusTransitionError: the state machine forbids the move.
            ValueError: completed without transformed_url, or failed without
                        error_message.
        """
        ...


def validate_update(
    image_id: int,
    current: ImageStatus,
    target: ImageStatus,
    transformed_url: Optional[str],
    error_message: Optional[str],
) -> None:
    if not current.can_transition_to(target):
        raise InvalidStatusTransitionError(image_id, current.value, target.value)

    if target == ImageStatus.COMPLETED and not transformed_url:
        raise ValueError(f"Image {image_id}: completed requires a transformed_url")
    if target == ImageStatus.FAILED and not error_message:
        raise ValueError(f"Image {image_id}: failed requires an error_message")
    if target != ImageStatus.COMPLETED and transformed_url:
        raise ValueError(f"Image {image_id}: transformed_url only allowed on completed")
    if target != ImageStatus.FAILED and error_message:
        raise ValueError(f"Image {image_id}: error_message only allowed on failed")
