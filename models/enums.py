"""
Shared enumerations used across the entire project.

Using Python enums (inheriting from str) means:
- They serialize to JSON automatically ("completed", not "ImageStatus.COMPLETED")
- They work as SQLAlchemy column values
- They work as FastAPI query parameters
- Typos become immediate errors instead of silent bugs
"""

import enum


class ImageStatus(str, enum.Enum):
    PENDING = "pending"            # record created, no worker has picked it up yet
    PROCESSING = "processing"      # a worker is calling the AI service
    COMPLETED = "completed"        # transformed_url holds the result
    FAILED = "failed"              # error_message says why

    @property
    def is_terminal(self) -> bool:
        return self in (ImageStatus.COMPLETED, ImageStatus.FAILED)

    def can_transition_to(self, target: "ImageStatus") -> bool:
        """
        The only legal moves are pending → processing → completed | failed.

        processing is never skipped: a poller must be able to tell
        "never picked up" apart from "attempted and failed".
        """
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[ImageStatus, frozenset[ImageStatus]] = {
    ImageStatus.PENDING: frozenset({ImageStatus.PROCESSING}),
    ImageStatus.PROCESSING: frozenset({ImageStatus.COMPLETED, ImageStatus.FAILED}),
    ImageStatus.COMPLETED: frozenset(),
    ImageStatus.FAILED: frozenset(),
}


class StoreBackend(str, enum.Enum):
    MEMORY = "memory"   # dict in process memory, lost on restart
    SQL = "sql"         # SQLAlchemy-backed images table
