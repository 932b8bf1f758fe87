"""Anthropic Claude provider.

Uses the Messages streaming API of the official SDK.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

from collections.abc import AsyncIterator
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..models import ChatMessage, StreamingResponse, TokenUsage

DEFAULT_MAX_TOKENS = 4096  # The Messages API has no default


class AnthropicProvider(LLMProvider):
    """Streams replies from Claude.

    System messages are merged into the top-level ``system`` field, which
    is where the Messages API expects them.
    """

    name = "anthropic"
    default_model = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model or self.default_model
        self._client = AsyncAnthropic(api_key=api_key, base_url=base_url, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    @staticmethod
    def split_system(messages: list[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
        """Separate system text from the conversation turns."""
        system = [m.content for m in messages if m.role == "system"]
        turns = [m.model_dump() for m in messages if m.role != "system"]
        return ("\n\n".join(system) if system else None), turns

    def request_params(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> dict[str, Any]:
        """Keyword arguments for ``messages.stream``; unset options are left out."""
        system, turns = self.split_system(messages)
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": turns,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
        }
        if system:
            params["system"] = system
        if temperature is not None:
            params["temperature"] = temperature
        params.update(kwargs)
        return params

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        params = self.request_params(messages, model, temperature, max_tokens, **kwargs)
        response = StreamingResponse()
        response.attach(self._deltas(params, response))
        return response

    async def _deltas(self, params: dict[str, Any], response: StreamingResponse) -> AsyncIterator[str]:
        usage = TokenUsage()
        async with self._client.messages.stream(**params) as stream:
            async for event in stream:
                if event.type == "message_start":
                    usage.prompt_tokens = event.message.usage.input_tokens
                elif event.type == "message_delta":
                    # Cumulative count
                    usage.completion_tokens = event.usage.output_tokens
                elif event.type == "content_block_delta" and event.delta.type == "text_delta":
                    yield event.delta.text
        response.usage = usage

    async def close(self) -> None:
        await self._client.close()
