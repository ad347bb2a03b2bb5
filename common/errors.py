"""
Exception hierarchy shared by the store, the AI client and the worker.

Nothing here ever reaches the task queue: the worker catches every one of
these and turns it into a `failed` status with a readable error_message
(see describe_failure below).
"""

from typing import Optional


class StyleShiftError(Exception):
    """Base class for all errors raised by this project."""


class ImageDecodeError(StyleShiftError):
    """The stored original_url is not a decodable base64 image."""


class StyleNotFoundError(StyleShiftError):

    def __init__(self, style: str):
        super().__init__(f"Style '{style}' not found")
        self.style = style


class InvalidStatusTransitionError(StyleShiftError):

    def __init__(self, image_id: int, current: str, target: str):
        super().__init__(
            f"Image {image_id} cannot move from '{current}' to '{target}'"
        )
        self.image_id = image_id
        self.current = current
        self.target = target


# ── AI client errors ────────────────────────────────────────────

class TransformationClientError(StyleShiftError):
    """Base class for anything that went wrong talking to the AI service."""


class TransformationAPIError(TransformationClientError):
    """
    The service answered, but with an error: a non-2xx status, or an
    error object embedded in an otherwise successful (200) stream.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class TransformationTimeoutError(TransformationClientError):
    """Timeout or transport-level failure (DNS, connection reset, ...)."""


class ResponseTooLargeError(TransformationClientError):

    def __init__(self, limit: int):
        super().__init__(f"Response exceeded {limit} bytes")
        self.limit = limit


# ── User-facing messages ────────────────────────────────────────

CONTENT_FILTER_MESSAGE = (
    "Content moderation failed. Please try a different image or style."
)
NETWORK_MESSAGE = "Network timeout while contacting the transformation service. Please retry later."


def describe_failure(exc: BaseException) -> str:
    """Turn an exception raised inside a worker into an error_message for the Image."""
    if isinstance(exc, TransformationAPIError):
        if exc.code == "content_filter":
            return CONTENT_FILTER_MESSAGE
        if exc.status_code is not None:
            return f"Transformation service error ({exc.status_code}): {exc.message}"
        return f"Transformation service error: {exc.message}"

    if isinstance(exc, TransformationTimeoutError):
        return NETWORK_MESSAGE

    if isinstance(exc, StyleShiftError):
        return str(exc)

    text = str(exc) or exc.__class__.__name__
    lowered = text.lower()
    if "timeout" in lowered or "timed out" in lowered or "network" in lowered:
        return NETWORK_MESSAGE
    return f"Unexpected error: {text}"
