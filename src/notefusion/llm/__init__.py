from .base import LLMProvider
from .factory import create_llm_provider
from .models import ChatMessage, StreamingResponse, TokenUsage
from .providers import AnthropicProvider, DeepSeekProvider, OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "ChatMessage",
    "DeepSeekProvider",
    "LLMProvider",
    "OpenAIProvider",
    "StreamingResponse",
    "TokenUsage",
    "create_llm_provider",
]
