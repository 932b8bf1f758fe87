from typing import Any

from .openai import OpenAIProvider

DEEPSEEK_BASE_URL = "https://api.deepseek.com"


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek through its OpenAI-compatible endpoint."""

    name = "deepseek"
    default_model = "deepseek-chat"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str = DEEPSEEK_BASE_URL,
        **client_kwargs: Any
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, **client_kwargs)
