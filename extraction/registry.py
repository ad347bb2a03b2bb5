"""
Response extractor — runs the strategies in a fixed order, first match wins.

    1. direct   full data:image/...;base64, token anywhere in the text
    2. url      markdown image / bare image URL (download link preferred)
    3. json     {...} span parsed, conventional fields probed
    4. loose    bare base64,<payload> with a synthesized JPEG prefix

If all four miss, the moderation classifier decides between
ModerationRejection and NoMatch.

To add a strategy: create the class, put it in DEFAULT_STRATEGIES at the
position it should be tried.
"""

import logging
from typing import Optional, Sequence

from extraction.base import AbstractStrategy, ExtractionResult, NoMatch
from extraction.direct import DirectDataUrlStrategy
from extraction.json_field import JsonFieldStrategy
from extraction.loose import LooseBase64Strategy
from extraction.moderation import classify_moderation
from extraction.url import ImageUrlStrategy

logger = logging.getLogger(__name__)

NO_IMAGE_MESSAGE = "No valid image data found in the response"
EMPTY_RESPONSE_MESSAGE = "Empty response received from the transformation service"

# Strategies are stateless, so one instance of each is shared
DEFAULT_STRATEGIES: tuple[AbstractStrategy, ...] = (
    DirectDataUrlStrategy(),
    ImageUrlStrategy(),
    JsonFieldStrategy(),
    LooseBase64Strategy(),
)


class ResponseExtractor:

    def __init__(self, strategies: Optional[Sequence[AbstractStrategy]] = None):
        self._strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def extract(self, text: Optional[str]) -> ExtractionResult:
        if not text or not text.strip():
            return NoMatch(message=EMPTY_RESPONSE_MESSAGE)

        for strategy in self._strategies:
            result = strategy.match(text)
            if result is not None:
                if result.low_confidence:
                    logger.warning(
                        f"Accepted low-confidence image data via '{strategy.name}' "
                        f"({len(result.payload)} chars)"
                    )
                else:
                    logger.info(
                        f"Extracted image via '{strategy.name}' ({len(result.payload)} chars)"
                    )
                return result

        rejection = classify_moderation(text)
        if rejection is not None:
            logger.warning(f"Response classified as moderation rejection: {rejection.reason}")
            return rejection

        logger.warning(f"No image found in response ({len(text)} chars): {text[:200]!r}")
        return NoMatch(message=NO_IMAGE_MESSAGE)


_default_extractor = ResponseExtractor()


def extract(text: Optional[str]) -> ExtractionResult:
    """Module-level shortcut using the default strategy order."""
    return _default_extractor.extract(text)
