"""
Direct data URL scan.

The happy path: the response contains data:image/png;base64,... somewhere,
possibly surrounded by prose, quotes or markdown. First occurrence wins.
"""

from typing import Optional

from extraction.base import AbstractStrategy, DATA_URL_PATTERN, DirectMatch


class DirectDataUrlStrategy(AbstractStrategy):

    def match(self, text: str) -> Optional[DirectMatch]:
        found = DATA_URL_PATTERN.search(text)
        if found is None:
            return None
        return DirectMatch(
            payload=found.group(0),
            strategy=self.name,
            mime_subtype=found.group(1),
        )

    @property
    def name(self) -> str:
        return "direct"
