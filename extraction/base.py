"""
Extraction results and the strategy interface.

The AI service does not promise a response shape: sometimes a bare data URL,
sometimes a markdown link, sometimes JSON, sometimes just "failure reason: ...".
Each way of finding the image is a separate strategy class, and the extractor
tries them in order (see extraction/registry.py).

Results are small tagged dataclasses. Success variants share ImagePayload
(with .payload, the value to store as transformed_url); failure variants share
ExtractionFailure (with .message, the value to store as error_message).

    ImagePayload       ExtractionFailure
    ├─ DirectMatch     ├─ ModerationRejection
    ├─ UrlMatch        └─ NoMatch
    ├─ JsonFieldMatch
    └─ LooseMatch
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

# A complete data URL. Stops at quotes, backticks, whitespace and ")", which is
# where markdown/JSON/prose wrapping ends the token.
DATA_URL_PATTERN = re.compile(r"data:image/(jpeg|png|webp);base64,[^\"'`\s)]+")


@dataclass(frozen=True)
class ImagePayload:
    payload: str
    strategy: str = ""
    low_confidence: bool = False

    @property
    def is_url(self) -> bool:
        return self.payload.startswith("http")


@dataclass(frozen=True)
class DirectMatch(ImagePayload):
    mime_subtype: str = ""


@dataclass(frozen=True)
class UrlMatch(ImagePayload):
    preview_url: Optional[str] = None   # set when a download link won over the preview


@dataclass(frozen=True)
class JsonFieldMatch(ImagePayload):
    field: Optional[str] = None         # None when found by scanning the serialized JSON


@dataclass(frozen=True)
class LooseMatch(ImagePayload):
    low_confidence: bool = True


@dataclass(frozen=True)
class ExtractionFailure:
    message: str


@dataclass(frozen=True)
class ModerationRejection(ExtractionFailure):
    reason: Optional[str] = None


@dataclass(frozen=True)
class NoMatch(ExtractionFailure):
    pass


ExtractionResult = Union[ImagePayload, ExtractionFailure]


class AbstractStrategy(ABC):

    @abstractmethod
    def match(self, text: str) -> Optional[ImagePayload]:
        """
        Try to recover an image from the full response text.

        Returns:
            an ImagePayload subclass on success, None if this strategy
            found nothing (the extractor then moves on to the next one).
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs and on the returned payload."""
        ...
