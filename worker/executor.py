"""
Transformation worker — runs a single job inside a pool thread.

This is the code that actually DOES THE WORK. The task queue calls
worker.run(job) for every admitted job, and this method handles the full
image lifecycle:

    1. Look up the Image in the store (absent → log and drop the job)
    2. Mark it PROCESSING
    3. Decode original_url (data URL) into raw bytes
    4. Call the AI client with the bytes and the style's prompt
    5. Run the response extractor over the accumulated text
    6. Success → COMPLETED with transformed_url
    7. Anything else → FAILED with a readable error_message

The contract the queue relies on: run() NEVER raises. Every path after step 2
ends in a terminal status write, so a poller never sees an image stuck in
PROCESSING because of an exception.

Thread safety:
- The worker holds no per-job state; many threads call run() at once
- Each run() touches only its own Image row in the store
- The shared AI client (httpx.Client) is thread-safe
"""

import logging
import time
from typing import Optional

from ai.base import AbstractTransformationClient
from common.codec import decode_data_url
from common.errors import InvalidStatusTransitionError, describe_failure
from common.styles import StyleCatalog
from extraction.base import ExtractionResult, ImagePayload
from extraction.registry import ResponseExtractor
from models.enums import ImageStatus
from models.image import ImageRecord
from scheduler.base import TransformJob
from store.base import AbstractJobStore

logger = logging.getLogger(__name__)


class TransformationWorker:

    def __init__(
        self,
        store: AbstractJobStore,
        client: AbstractTransformationClient,
        styles: StyleCatalog,
        extractor: Optional[ResponseExtractor] = None,
    ):
        self._store = store
        self._client = client
        self._styles = styles
        self._extractor = extractor or ResponseExtractor()

    def run(self, job: TransformJob) -> None:
        try:
            image = self._start(job)
            if image is None:
                return
        except Exception as e:
            # Nothing was written yet, so there is nothing to roll forward
            logger.error(f"Job {job.id}: could not start image {job.image_id}: {e}", exc_info=True)
            return

        start_time = time.monotonic()
        try:
            outcome = self._transform(job, image)
        except Exception as e:
            logger.error(f"Job {job.id} (image {job.image_id}) failed: {e}")
            self._finish(job, ImageStatus.FAILED, error_message=describe_failure(e))
            return

        elapsed = time.monotonic() - start_time
        if isinstance(outcome, ImagePayload):
            logger.info(
                f"Job {job.id} (image {job.image_id}) completed in {elapsed:.3f}s "
                f"via '{outcome.strategy}'"
            )
            self._finish(job, ImageStatus.COMPLETED, transformed_url=outcome.payload)
        else:
            logger.warning(
                f"Job {job.id} (image {job.image_id}) produced no image after "
                f"{elapsed:.3f}s: {outcome.message}"
            )
            self._finish(job, ImageStatus.FAILED, error_message=outcome.message)

    # ── Steps ───────────────────────────────────────────────────

    def _start(self, job: TransformJob) -> Optional[ImageRecord]:
        """Steps 1-2. Returns None when the job should be dropped without any write."""
        image = self._store.get_image(job.image_id)
        if image is None:
            logger.warning(f"Job {job.id}: image {job.image_id} not found, skipping")
            return None

        try:
            image = self._store.update_image_status(job.image_id, ImageStatus.PROCESSING)
        except InvalidStatusTransitionError as e:
            # Re-submitted image that already ran (or is running elsewhere)
            logger.warning(f"Job {job.id}: {e}, skipping")
            return None

        logger.info(f"Job {job.id}: image {job.image_id} → processing (style '{job.style}')")
        return image

    def _transform(self, job: TransformJob, image: ImageRecord) -> ExtractionResult:
        """Steps 3-5. May raise; run() turns any exception into a failed status."""
        prompt = self._styles.prompt_for(job.style)

        image_bytes = decode_data_url(image.original_url)
        logger.debug(f"Job {job.id}: decoded {len(image_bytes)} bytes")

        response_text = self._client.transform(image_bytes, prompt)
        return self._extractor.extract(response_text)

    def _finish(
        self,
        job: TransformJob,
        status: ImageStatus,
        transformed_url: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Steps 6-7. The terminal write itself must not raise past run().

        If recording COMPLETED fails, a FAILED write describing that error is
        attempted instead, so the image does not stay in PROCESSING.
        """
        try:
            self._store.update_image_status(
                job.image_id,
                status,
                transformed_url=transformed_url,
                error_message=error_message,
            )
            return
        except Exception as e:
            logger.error(
                f"Job {job.id}: could not record '{status.value}' for image {job.image_id}: {e}",
                exc_info=True,
            )
            if status != ImageStatus.COMPLETED:
                return
            fallback_message = describe_failure(e)

        try:
            self._store.update_image_status(
                job.image_id, ImageStatus.FAILED, error_message=fallback_message
            )
        except Exception as e:
            logger.error(
                f"Job {job.id}: could not record 'failed' for image {job.image_id} either: {e}",
                exc_info=True,
            )
