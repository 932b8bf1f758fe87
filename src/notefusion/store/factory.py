"""Factory for creating chat stores."""

from typing import Any

from .base import ChatStore


def create_chat_store(
    backend: str = "memory",
    **kwargs: Any
) -> ChatStore:
    """Create a chat store.

    Args:
        backend: Backend type ("memory", "sqlite" or "http")
        **kwargs: Backend-specific configuration

    Returns:
        ChatStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryChatStore
        return InMemoryChatStore(**kwargs)

    elif backend == "sqlite":
        from .sqlite import SQLiteChatStore
        return SQLiteChatStore(**kwargs)

    elif backend == "http":
        from .http import HTTPChatStore
        return HTTPChatStore(**kwargs)

    raise ValueError(
        f"Unsupported chat store backend: {backend}. "
        f"Supported backends: memory, sqlite, http"
    )
