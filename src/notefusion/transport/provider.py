"""Transport that streams straight from an LLM provider."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from ..llm.base import LLMProvider
from ..llm.models import ChatMessage
from ..prompts import note_context
from .base import AsyncIteratorTransport
from .models import StreamRequest

logger = logging.getLogger(__name__)


class ProviderTransport(AsyncIteratorTransport):
    """Streams a turn from an ``LLMProvider``.

    The system prompt carries the directive protocol and, when present, the
    document the user is working on.
    """

    def __init__(
        self,
        provider: LLMProvider,
        system_prompt: str | None = None,
        **completion_kwargs: Any
    ) -> None:
        self._provider = provider
        self._system_prompt = system_prompt
        self._completion_kwargs = completion_kwargs

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def build_messages(self, request: StreamRequest) -> list[ChatMessage]:
        system_parts = []
        if self._system_prompt:
            system_parts.append(self._system_prompt)
        if request.current_content:
            system_parts.append(note_context(request.current_content))

        messages = []
        if system_parts:
            messages.append(ChatMessage(role="system", content="\n\n".join(system_parts)))
        messages.extend(request.history)
        if not request.history or request.history[-1].content != request.message:
            messages.append(ChatMessage(role="user", content=request.message))
        return messages

    async def iter_chunks(self, request: StreamRequest) -> AsyncIterator[str]:
        stream = await self._provider.chat_completion_stream(
            self.build_messages(request), **self._completion_kwargs
        )
        async for chunk in stream:
            yield chunk
        if stream.usage is not None:
            logger.debug(
                "%s used %d prompt + %d completion tokens over %d deltas",
                self._provider.model, stream.usage.prompt_tokens,
                stream.usage.completion_tokens, stream.delta_count,
            )

    async def close(self) -> None:
        await self._provider.close()
