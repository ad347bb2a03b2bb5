"""Tests for the data URL helpers."""

import io

import pytest
from PIL import Image

from common.codec import decode_data_url, encode_data_url, sniff_mime
from common.errors import ImageDecodeError


def _image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buf, format=fmt)
    return buf.getvalue()


def test_decode_strips_prefix():
    assert decode_data_url("data:image/png;base64,aGVsbG8=") == b"hello"


def test_decode_accepts_bare_base64():
    assert decode_data_url("aGVsbG8=") == b"hello"


def test_encode_then_decode():
    url = encode_data_url(b"\x89PNG raw", "image/png")

    assert url.startswith("data:image/png;base64,")
    assert decode_data_url(url) == b"\x89PNG raw"


@pytest.mark.parametrize("bad", ["", "data:image/png;base64,", "data:image/png;base64,@@@"])
def test_decode_rejects_garbage(bad):
    with pytest.raises(ImageDecodeError):
        decode_data_url(bad)


@pytest.mark.parametrize("fmt, mime", [("PNG", "image/png"), ("JPEG", "image/jpeg"), ("WEBP", "image/webp")])
def test_sniff_mime(fmt, mime):
    assert sniff_mime(_image_bytes(fmt)) == mime


def test_sniff_mime_falls_back_to_jpeg():
    assert sniff_mime(b"not an image") == "image/jpeg"
