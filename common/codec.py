"""
Data URL helpers for image payloads.

Images travel through the system as data URLs ("data:image/png;base64,...").
The worker decodes the stored original to raw bytes before handing it to the
AI client, and the client re-encodes it with the real MIME type, which Pillow
sniffs from the bytes themselves.
"""

import base64
import binascii
import io
import re

from PIL import Image, UnidentifiedImageError

from common.errors import ImageDecodeError

DEFAULT_MIME = "image/jpeg"

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)


def decode_data_url(data_url: str) -> bytes:
    """Strip an optional data:image/...;base64, prefix and decode the rest."""
    if not data_url:
        raise ImageDecodeError("Original image is empty")

    encoded = _DATA_URL_PREFIX.sub("", data_url.strip(), count=1)
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Original image is not valid base64: {e}") from e

    if not raw:
        raise ImageDecodeError("Original image is empty")
    return raw


def encode_data_url(raw: bytes, mime: str = DEFAULT_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def sniff_mime(raw: bytes) -> str:
    """
    Identify the image format with Pillow.

    Falls back to image/jpeg when Pillow cannot tell, which is also what the
    AI service assumes for unlabelled input.
    """
    try:
        with Image.open(io.BytesIO(raw)) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return DEFAULT_MIME
    return mime or DEFAULT_MIME
