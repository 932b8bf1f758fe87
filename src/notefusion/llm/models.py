"""Data exchanged with LLM providers."""

from collections.abc import AsyncIterator

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A role/content pair sent to an LLM provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="'system', 'user' or 'assistant'")
    content: str


class TokenUsage(BaseModel):
    """Token counts a provider reports once a stream has ended."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class StreamingResponse:
    """Async iterator over the text deltas of one completion.

    Providers create the response first and attach their delta generator
    afterwards, so the generator can write ``usage`` back into the response
    it feeds. ``usage`` stays None until iteration has finished.

    Usage:
        stream = await provider.chat_completion_stream(messages)
        async for delta in stream:
            print(delta, end="")
        print(stream.usage)
    """

    def __init__(self, deltas: AsyncIterator[str] | None = None) -> None:
        self._deltas = deltas
        self.usage: TokenUsage | None = None
        self.delta_count = 0

    def attach(self, deltas: AsyncIterator[str]) -> None:
        self._deltas = deltas

    def __aiter__(self) -> "StreamingResponse":
        return self

    async def __anext__(self) -> str:
        if self._deltas is None:
            raise StopAsyncIteration
        delta = await self._deltas.__anext__()
        self.delta_count += 1
        return delta
