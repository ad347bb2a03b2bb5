"""
JSON-wrapped scan.

Handles responses like:

    Here you go: {"image": "data:image\\/png;base64,iVBOR..."}

JSON escapes ("\\/", "\\n") hide the data URL from the direct scan, so the
span from the first "{" to the last "}" is parsed and a fixed list of
conventional field names is probed. If none of them holds an image, the
parsed document is re-serialized (which drops the escapes) and scanned with
the direct data URL pattern.
"""

import json
import logging
import re
from typing import Any, Optional

from extraction.base import AbstractStrategy, DATA_URL_PATTERN, JsonFieldMatch
from extraction.url import IMAGE_URL_PATTERN

logger = logging.getLogger(__name__)

JSON_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")

PROBE_FIELDS = ("image", "imageUrl", "image_url", "url", "data", "base64", "result", "output")


class JsonFieldStrategy(AbstractStrategy):

    def __init__(self, fields: tuple[str, ...] = PROBE_FIELDS):
        self.fields = fields

    def match(self, text: str) -> Optional[JsonFieldMatch]:
        span = JSON_SPAN_PATTERN.search(text)
        if span is None:
            return None

        try:
            document = json.loads(span.group(0))
        except json.JSONDecodeError as e:
            logger.debug(f"JSON-looking span did not parse: {e}")
            return None

        if isinstance(document, dict):
            for field in self.fields:
                payload = _image_from_value(document.get(field))
                if payload is not None:
                    return JsonFieldMatch(payload=payload, strategy=self.name, field=field)

        found = DATA_URL_PATTERN.search(json.dumps(document, ensure_ascii=False))
        if found is not None:
            return JsonFieldMatch(payload=found.group(0), strategy=self.name)
        return None

    @property
    def name(self) -> str:
        return "json"


def _image_from_value(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None

    if "data:image" in value:
        found = DATA_URL_PATTERN.search(value)
        return found.group(0) if found else None

    found = IMAGE_URL_PATTERN.search(value)
    if found is not None:
        return found.group(1) or found.group(0)
    return None
