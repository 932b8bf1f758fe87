"""Abstract base class for chat stores.

This module defines the interface for chat session persistence.
The abstraction hides:
- Storage format (SQL rows, JSON documents, in-memory objects)
- Persistence mechanism (file, remote REST API, process memory)
- Identifier generation
"""

from abc import ABC, abstractmethod

from .models import ChatRecord, ChatSummary, StoredMessage


class ChatStore(ABC):
    """Abstract chat store.

    Identifiers are assigned by the store on ``create``; every later write
    for the same chat goes through ``update``.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def create(self, title: str, messages: list[StoredMessage]) -> ChatRecord:
        """Persist a new chat and return it with its assigned id."""

    @abstractmethod
    async def update(self, chat_id: str, title: str, messages: list[StoredMessage]) -> ChatRecord:
        """Replace title and messages of an existing chat.

        Raises:
            ChatNotFoundError: If no chat has this id
        """

    @abstractmethod
    async def get(self, chat_id: str) -> ChatRecord:
        """Load a chat.

        Raises:
            ChatNotFoundError: If no chat has this id
        """

    @abstractmethod
    async def list_summaries(self) -> list[ChatSummary]:
        """List chats, most recently updated first."""

    @abstractmethod
    async def delete(self, chat_id: str) -> None:
        """Delete a chat.

        Raises:
            ChatNotFoundError: If no chat has this id
        """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
