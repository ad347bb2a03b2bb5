"""
SQL-backed job store.

Every call opens its OWN session and closes it before returning, so worker
threads never share a session (SQLAlchemy sessions are not thread-safe).

The status update runs SELECT ... FOR UPDATE inside one transaction: the read
of the current status and the write of the new one happen atomically. On
SQLite (tests) FOR UPDATE is silently ignored, which is fine for a single
process.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from models.enums import ImageStatus
from models.image import ImageRecord, ImageRow
from store.base import AbstractJobStore, validate_update

logger = logging.getLogger(__name__)


class SqlJobStore(AbstractJobStore):

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create_image(self, user_id: int, original_url: str, style: str) -> ImageRecord:
        session: Session = self._session_factory()
        try:
            row = ImageRow(
                user_id=user_id,
                original_url=original_url,
                style=style,
                status=ImageStatus.PENDING.value,
            )
            session.add(row)
            session.commit()
            session.refresh(row)  # reload to get server-generated fields (id, created_at)
            return row.to_record()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_image(self, image_id: int) -> Optional[ImageRecord]:
        with self._session_factory() as session:
            row = session.get(ImageRow, image_id)
            return row.to_record() if row is not None else None

    def list_user_images(self, user_id: int) -> list[ImageRecord]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(ImageRow)
                .where(ImageRow.user_id == user_id)
                .order_by(ImageRow.created_at.desc(), ImageRow.id.desc())
            ).all()
            return [row.to_record() for row in rows]

    def update_image_status(
        self,
        image_id: int,
        status: ImageStatus,
        transformed_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[ImageRecord]:
        session: Session = self._session_factory()
        try:
            row = session.scalars(
                select(ImageRow).where(ImageRow.id == image_id).with_for_update()
            ).first()
            if row is None:
                return None

            validate_update(
                image_id, ImageStatus(row.status), status, transformed_url, error_message
            )

            row.status = status.value
            if transformed_url:
                row.transformed_url = transformed_url
            if error_message:
                row.error_message = error_message
            session.commit()

            logger.debug(f"Image {image_id} → {status.value}")
            return row.to_record()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
