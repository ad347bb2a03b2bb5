"""
Hosted image URL scan.

Some gateways upload the generated image and answer with markdown instead of
inline data:

    ![file_abc](https://cdn.example.com/abc.png)

    [下载⏬](https://cdn.example.com/abc_full.png)

The preview link is either a markdown image or any bare https URL ending in a
known image extension. When a download link sits next to the preview, the
download URL is preferred: it points at the full-resolution file.
"""

import re
from typing import Optional

from extraction.base import AbstractStrategy, UrlMatch

IMAGE_URL_PATTERN = re.compile(
    r"!\[.*?\]\((https://[^\s)]+)\)|https://\S+\.(?:png|jpe?g|gif|webp|svg)",
    re.IGNORECASE,
)

DOWNLOAD_LINK_PATTERN = re.compile(
    r"\[(?:下载⏬?|download[^\]]*)\]\((https://[^\s)]+)\)",
    re.IGNORECASE,
)


class ImageUrlStrategy(AbstractStrategy):

    def match(self, text: str) -> Optional[UrlMatch]:
        found = IMAGE_URL_PATTERN.search(text)
        if found is None:
            return None
        preview = found.group(1) or found.group(0)

        download = DOWNLOAD_LINK_PATTERN.search(text)
        if download is not None and download.group(1) != preview:
            return UrlMatch(
                payload=download.group(1),
                strategy=self.name,
                preview_url=preview,
            )
        return UrlMatch(payload=preview, strategy=self.name)

    @property
    def name(self) -> str:
        return "url"
