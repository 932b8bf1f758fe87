"""OpenAI Chat Completions provider.

Also serves OpenAI-compatible endpoints through ``base_url``.
"""

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import ChatMessage, StreamingResponse, TokenUsage


class OpenAIProvider(LLMProvider):
    """Streams chat completions from the OpenAI API.

    Usage arrives in a final chunk without choices when
    ``stream_options.include_usage`` is set.
    """

    name = "openai"
    default_model = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model or self.default_model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion_stream(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> StreamingResponse:
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": [m.model_dump() for m in messages],
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        params.update(kwargs)

        response = StreamingResponse()
        response.attach(self._deltas(params, response))
        return response

    async def _deltas(self, params: dict[str, Any], response: StreamingResponse) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(**params)
        async for chunk in stream:
            if chunk.usage is not None:
                response.usage = TokenUsage(
                    prompt_tokens=chunk.usage.prompt_tokens,
                    completion_tokens=chunk.usage.completion_tokens,
                )
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content

    async def close(self) -> None:
        await self._client.close()
