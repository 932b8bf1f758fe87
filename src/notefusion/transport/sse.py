"""Server-Sent Events transport for the Note Fusion chat backend.

Wire format: ``POST {api}/ai/chat/stream`` answers with ``data: `` lines.
Each carries JSON with either ``content`` (a chunk) or ``error``; the line
``data: [DONE]`` or the end of the body completes the stream.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from ..exceptions import TransportError
from .base import AsyncIteratorTransport
from .models import StreamRequest

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class SSETransport(AsyncIteratorTransport):
    """Streams turns from the backend over SSE with httpx."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        token: str | None = None,
        timeout: float | None = None,
        **client_kwargs: Any
    ):
        """Initialize the SSE transport.

        Args:
            api_url: Backend URL, with or without the trailing ``/api``
            token: Bearer token sent with every request
            timeout: Read timeout; None leaves hung streams to explicit cancellation
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        base = api_url.rstrip("/")
        self._url = f"{base if base.endswith('/api') else base + '/api'}/ai/chat/stream"
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(headers=headers, timeout=timeout, **client_kwargs)

    @property
    def url(self) -> str:
        return self._url

    async def iter_chunks(self, request: StreamRequest) -> AsyncIterator[str]:
        async with self._client.stream("POST", self._url, json=request.to_payload()) as response:
            if response.is_error:
                raise TransportError(f"HTTP error! status: {response.status_code}")

            async for line in response.aiter_lines():
                if not line.startswith(DATA_PREFIX):
                    continue
                data = line[len(DATA_PREFIX):]
                if data == DONE_SENTINEL:
                    return
                try:
                    parsed = json.loads(data)
                except json.JSONDecodeError:
                    logger.debug("Ignoring undecodable SSE line: %r", data)
                    continue
                if not isinstance(parsed, dict):
                    continue
                if parsed.get("content"):
                    yield parsed["content"]
                elif parsed.get("error"):
                    raise TransportError(str(parsed["error"]))

    async def close(self) -> None:
        await self._client.aclose()
