"""Streaming LLM provider interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, StreamingResponse

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """A chat model that answers with a stream of text deltas.

    Assistant turns are always rendered while they arrive, so streaming is
    the only completion mode. Each implementation owns its SDK client and
    releases it in ``close``:

        async with provider:
            stream = await provider.chat_completion_stream(messages)
            async for delta in stream:
                ...
    """

    name: str = "llm"

    @property
    @abstractmethod
    def model(self) -> str:
        """Model used when a call does not name one."""

    @abstractmethod
    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        """Start a completion and return its delta stream.

        The request goes out on first iteration, so SDK errors are raised
        from ``async for`` rather than from this call.

        Args:
            messages: System prompt, prior turns and the new user message
            model: Overrides ``self.model`` for this call
            temperature: Sampling temperature; None keeps the model default
            max_tokens: Upper bound on generated tokens
            **kwargs: Passed through to the SDK request
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the SDK client."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            await self.close()
        except RuntimeError as e:
            # httpx can outlive the loop at shutdown: encode/httpx#914
            if "Event loop is closed" not in str(e):
                raise
            logger.debug("%s client closed after its event loop", self.name)
