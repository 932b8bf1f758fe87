from typing import Any

from .base import TransportChannel


def create_transport(kind: str, **config: Any) -> TransportChannel:
    """Create a transport channel.

    Args:
        kind: 'provider' (direct LLM provider) or 'sse' (Note Fusion backend)
        **config: Transport-specific configuration
            For provider:
                - provider: LLMProvider (required)
                - system_prompt: str | None
            For sse:
                - api_url: str (default: 'http://localhost:8000')
                - token: str | None

    Raises:
        ValueError: If transport kind is not supported
        TypeError: If required configuration is missing
    """
    kind_lower = kind.lower()

    if kind_lower == "provider":
        if "provider" not in config:
            raise TypeError("Provider transport requires 'provider' in config")
        from .provider import ProviderTransport
        return ProviderTransport(**config)

    if kind_lower == "sse":
        from .sse import SSETransport
        return SSETransport(**config)

    raise ValueError(
        f"Unsupported transport: {kind}. "
        f"Supported transports: 'provider', 'sse'"
    )
