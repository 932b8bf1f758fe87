from typing import Any

from .base import LLMProvider
from .providers import AnthropicProvider, DeepSeekProvider, OpenAIProvider

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "deepseek": DeepSeekProvider,
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
}


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider by name.

    Args:
        provider: 'openai', 'deepseek', 'anthropic' (alias 'claude')
        **config: Constructor arguments; ``api_key`` is required,
            ``model`` and ``base_url`` are optional

    Raises:
        ValueError: If provider type is not supported
        TypeError: If ``api_key`` is missing

    Examples:
        >>> provider = create_llm_provider("deepseek", api_key="sk-...")
    """
    provider_class = _PROVIDERS.get(provider.lower())
    if provider_class is None:
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(sorted(_PROVIDERS))}"
        )
    if not config.get("api_key"):
        raise TypeError(f"{provider} provider requires 'api_key' in config")
    return provider_class(**config)
