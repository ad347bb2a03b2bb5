"""
Interface for the external AI transformation service.

The worker only needs one call: send image bytes + prompt, get back the full
response text. Whether the service streams or answers in one shot is the
client's business; the worker always sees the fully accumulated text.
"""

from abc import ABC, abstractmethod


class AbstractTransformationClient(ABC):

    @abstractmethod
    def transform(self, image_bytes: bytes, prompt: str) -> str:
        """
        Ask the service to restyle `image_bytes` according to `prompt`.

        Returns:
            the raw response text (free text, markdown or JSON; the response
            extractor deals with the shape).

        Raises:
            TransformationAPIError: non-2xx response or in-band error object
            TransformationTimeoutError: timeout / transport failure
            ResponseTooLargeError: response exceeded the configured cap
        """
        ...

    def close(self) -> None:
        """Release network resources. No-op by default."""
