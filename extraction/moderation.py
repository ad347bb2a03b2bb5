"""
Moderation classifier — runs only after every strategy came up empty.

A response with no image is either a content-policy rejection (an operator or
user problem: try another picture) or a parsing problem on our side. Telling
them apart matters for what the user is shown, so a keyword check decides,
and a best-effort "failure reason: ..." regex pulls out the service's own
explanation when there is one.
"""

import re
from typing import Optional

from extraction.base import ModerationRejection

MODERATION_KEYWORDS = (
    "input_moderation",
    "moderation",
    "content_policy",
    "content policy",
    "content_filter",
    "failed",
    "failure",
)

FAILURE_REASON_PATTERN = re.compile(r"failure reason[：:]\s*([^\n]+)", re.IGNORECASE)

GENERIC_REASON = "content moderation rejected the request"


def classify_moderation(text: str) -> Optional[ModerationRejection]:
    """Return a ModerationRejection if `text` reads like a policy refusal, else None."""
    lowered = text.lower()
    if not any(keyword in lowered for keyword in MODERATION_KEYWORDS):
        return None

    found = FAILURE_REASON_PATTERN.search(text)
    reason = found.group(1).strip() if found else None
    return ModerationRejection(
        message=f"Content moderation failed: {reason or GENERIC_REASON}",
        reason=reason,
    )
