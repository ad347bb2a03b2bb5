"""
AI transformation client for OpenAI-compatible chat completion endpoints.

Request shape (POST {base_url}/chat/completions):

    {
      "model": "gpt-4o-image",
      "messages": [{"role": "user", "content": [
          {"type": "image_url", "image_url": {"url": "data:image/png;base64,..."}},
          {"type": "text", "text": "<style prompt>"}
      ]}],
      "max_tokens": 4096,
      "stream": true
    }

Streaming responses are server-sent events, one JSON chunk per "data:" line,
terminated by "data: [DONE]". The text lives in choices[0].delta.content.
Single-shot responses carry it in choices[0].message.content.

This runs inside worker threads, so it uses a SYNC httpx.Client. One client
(and its connection pool) is shared by all workers: httpx.Client is
thread-safe.
"""

import json
import logging
import time
from typing import Iterator, Optional

import httpx

from ai.base import AbstractTransformationClient
from common.codec import encode_data_url, sniff_mime
from common.errors import (
    ResponseTooLargeError,
    TransformationAPIError,
    TransformationTimeoutError,
)
from config.settings import Settings

logger = logging.getLogger(__name__)

PROGRESS_LOG_INTERVAL = 1.0  # seconds between stream progress log lines


class OpenAICompatibleClient(AbstractTransformationClient):

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        stream: bool = True,
        max_tokens: int = 4096,
        max_response_bytes: int = 32 * 1024 * 1024,
        timeout: float = 300.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = model
        self.stream = stream
        self.max_tokens = max_tokens
        self.max_response_bytes = max_response_bytes
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout, connect=min(timeout, 30.0)),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "OpenAICompatibleClient":
        return cls(
            api_key=config.AI_API_KEY,
            base_url=config.AI_BASE_URL,
            model=config.AI_MODEL,
            stream=config.AI_STREAM,
            max_tokens=config.AI_MAX_TOKENS,
            max_response_bytes=config.AI_MAX_RESPONSE_BYTES,
            timeout=config.AI_TIMEOUT,
        )

    def transform(self, image_bytes: bytes, prompt: str) -> str:
        body = self._build_request(image_bytes, prompt)
        start = time.monotonic()
        try:
            if self.stream:
                text = self._transform_streaming(body)
            else:
                text = self._transform_single(body)
        except httpx.TimeoutException as e:
            raise TransformationTimeoutError(f"Request timed out: {e}") from e
        except httpx.TransportError as e:
            raise TransformationTimeoutError(f"Network error: {e}") from e

        logger.info(
            f"AI response received in {time.monotonic() - start:.2f}s "
            f"({len(text)} chars, stream={self.stream})"
        )
        return text

    def close(self) -> None:
        self._client.close()

    # ── Request / response plumbing ─────────────────────────────

    def _build_request(self, image_bytes: bytes, prompt: str) -> dict:
        image_url = encode_data_url(image_bytes, sniff_mime(image_bytes))
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": image_url}},
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
            "max_tokens": self.max_tokens,
            "stream": self.stream,
        }

    def _transform_single(self, body: dict) -> str:
        with self._client.stream("POST", "/chat/completions", json=body) as response:
            if response.status_code >= 400:
                raise _api_error(response.status_code, response.read())

            declared = response.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > self.max_response_bytes:
                raise ResponseTooLargeError(self.max_response_bytes)

            # Count while reading; Content-Length can be absent or wrong
            raw = bytearray()
            for chunk in response.iter_bytes():
                raw.extend(chunk)
                if len(raw) > self.max_response_bytes:
                    raise ResponseTooLargeError(self.max_response_bytes)

        data = json.loads(raw)
        _raise_inband_error(data)
        choice = (data.get("choices") or [{}])[0]
        content = (choice.get("message") or {}).get("content") or ""
        _raise_if_filtered(choice, bool(content))
        return content

    def _transform_streaming(self, body: dict) -> str:
        parts: list[str] = []
        size = 0
        chunks = 0
        last_log = time.monotonic()

        with self._client.stream("POST", "/chat/completions", json=body) as response:
            if response.status_code >= 400:
                raise _api_error(response.status_code, response.read())

            for event in _iter_sse_events(response.iter_lines()):
                chunks += 1
                _raise_inband_error(event)
                choice = (event.get("choices") or [{}])[0]
                delta = (choice.get("delta") or {}).get("content") or ""

                if delta:
                    parts.append(delta)
                    size += len(delta.encode("utf-8"))
                    if size > self.max_response_bytes:
                        raise ResponseTooLargeError(self.max_response_bytes)

                _raise_if_filtered(choice, bool(parts))

                now = time.monotonic()
                if now - last_log > PROGRESS_LOG_INTERVAL:
                    logger.debug(f"Stream progress: {chunks} chunks, {size} bytes")
                    last_log = now

        logger.debug(f"Stream finished: {chunks} chunks, {size} bytes")
        return "".join(parts)


def _iter_sse_events(lines: Iterator[str]) -> Iterator[dict]:
    """Yield decoded JSON payloads from "data: ..." lines until [DONE]."""
    for line in lines:
        line = line.strip()
        if not line or not line.startswith("data:"):
            continue
        data = line[len("data:"):].strip()
        if data == "[DONE]":
            return
        try:
            yield json.loads(data)
        except json.JSONDecodeError:
            logger.debug(f"Skipping non-JSON stream line: {data[:100]!r}")


def _api_error(status_code: int, raw_body: bytes) -> TransformationAPIError:
    message = raw_body.decode("utf-8", errors="replace")[:500] or f"HTTP {status_code}"
    code = None
    try:
        error = json.loads(raw_body).get("error") or {}
    except (json.JSONDecodeError, AttributeError, UnicodeDecodeError):
        error = {}
    if isinstance(error, dict):
        message = error.get("message") or message
        code = error.get("code")
    elif isinstance(error, str):
        message = error
    return TransformationAPIError(message, status_code=status_code, code=code)


def _raise_inband_error(payload: dict) -> None:
    """A 200 response can still carry {"error": {...}}; surface it as an API error."""
    error = payload.get("error")
    if not error:
        return
    if isinstance(error, dict):
        raise TransformationAPIError(
            error.get("message") or "Unknown service error", code=error.get("code")
        )
    raise TransformationAPIError(str(error))


def _raise_if_filtered(choice: dict, has_content: bool) -> None:
    if choice.get("finish_reason") == "content_filter" and not has_content:
        raise TransformationAPIError(
            "Response blocked by the service's content filter", code="content_filter"
        )
