"""
Image model — one user-submitted picture and its transformation outcome.

Two representations live here:
- ImageRecord: a plain dataclass handed around by the store, the worker and the
  API. Nothing outside store/sql.py needs SQLAlchemy to read an image.
- ImageRow: the ORM mapping for the "images" table used by the SQL store.

Invariant kept by the stores:
- transformed_url is set iff status == completed
- error_message is set only when status == failed
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.enums import ImageStatus


@dataclass
class ImageRecord:
    id: int
    user_id: int
    original_url: str              # input image as a data URL
    style: str
    status: ImageStatus
    created_at: datetime
    transformed_url: Optional[str] = None
    error_message: Optional[str] = None


class ImageRow(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # ── Payload ─────────────────────────────────────────────────
    # Data URLs can be several megabytes, hence Text rather than String
    original_url: Mapped[str] = mapped_column(Text, nullable=False)
    transformed_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    style: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Outcome ─────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20), default=ImageStatus.PENDING.value, nullable=False, index=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def to_record(self) -> ImageRecord:
        return ImageRecord(
            id=self.id,
            user_id=self.user_id,
            original_url=self.original_url,
            style=self.style,
            status=ImageStatus(self.status),
            created_at=self.created_at,
            transformed_url=self.transformed_url,
            error_message=self.error_message,
        )

    def __repr__(self) -> str:
        return f"<Image {self.id} [{self.style}] {self.status}>"
