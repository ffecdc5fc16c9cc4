"""Client that forwards chat requests to the upstream LLM API."""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from chatdesk.core.config import Settings
from chatdesk.core.retry import retry_with_backoff

logger = logging.getLogger(__name__)

_NOT_JSON = object()


class ChatProxyError(Exception):
    """Raised when a chat request cannot be forwarded."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass
class UpstreamReply:
    """Response received from the upstream API."""

    status_code: int
    content_type: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parsed body, or the ``_NOT_JSON`` sentinel when it is not JSON."""
        try:
            return json.loads(self.text)
        except ValueError:
            return _NOT_JSON

    @property
    def is_json(self) -> bool:
        return self.json() is not _NOT_JSON


class ChatProxyClient:
    """Forwards chat payloads unchanged to ``CHAT_API_URL``."""

    def __init__(self, url: str, api_key: str = "", timeout: float = 60.0) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatProxyClient":
        return cls(
            url=settings.chat_api_url,
            api_key=settings.chat_api_key,
            timeout=settings.chat_api_timeout,
        )

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["api-key"] = self.api_key
        return headers

    @retry_with_backoff(max_attempts=3, min_wait=0.5, max_wait=4)
    async def _post(self, body: Any) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, headers=self._get_headers(), json=body)

    async def forward(self, body: Any) -> UpstreamReply:
        """Send ``body`` upstream and return whatever came back.

        Non-2xx upstream answers are returned, not raised. Transport errors
        that survive the retries raise ``ChatProxyError`` with status 502.
        """
        if not self.url:
            raise ChatProxyError("CHAT_API_URL is not configured", status_code=500)

        try:
            response = await self._post(body)
        except httpx.HTTPError as e:
            logger.error(f"Upstream chat API unreachable: {e!r}")
            raise ChatProxyError(str(e) or type(e).__name__, status_code=502) from e

        reply = UpstreamReply(
            status_code=response.status_code,
            content_type=response.headers.get("content-type", "application/json"),
            text=response.text,
        )
        if not reply.ok:
            logger.warning(f"Upstream chat API answered {reply.status_code}")
        return reply
