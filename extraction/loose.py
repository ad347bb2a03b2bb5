"""
Loose base64 scan — the last resort.

Catches a bare "base64,<payload>" with the data:image/...; prefix missing or
mangled, and rebuilds a JPEG data URL around it. Accepted, but flagged
low_confidence: the bytes may not be an image at all.
"""

import re
from typing import Optional

from extraction.base import AbstractStrategy, LooseMatch

LOOSE_BASE64_PATTERN = re.compile(r"base64,[a-zA-Z0-9+/=]+")

FALLBACK_PREFIX = "data:image/jpeg;"


class LooseBase64Strategy(AbstractStrategy):

    def match(self, text: str) -> Optional[LooseMatch]:
        found = LOOSE_BASE64_PATTERN.search(text)
        if found is None:
            return None
        return LooseMatch(payload=FALLBACK_PREFIX + found.group(0), strategy=self.name)

    @property
    def name(self) -> str:
        return "loose"
