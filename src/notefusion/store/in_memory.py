"""In-memory chat store.

Simple dict-based storage. Data is lost when the application exits.
"""

from uuid import uuid4

from ..exceptions import ChatNotFoundError
from .base import ChatStore
from .models import ChatRecord, ChatSummary, StoredMessage, utcnow


class InMemoryChatStore(ChatStore):
    """In-memory chat store (process lifetime only).

    Suitable for single-session use or testing.
    """

    def __init__(self) -> None:
        self._chats: dict[str, ChatRecord] = {}

    async def connect(self) -> None:
        """No-op for in-memory."""
        pass

    async def disconnect(self) -> None:
        """No-op for in-memory."""
        pass

    async def create(self, title: str, messages: list[StoredMessage]) -> ChatRecord:
        record = ChatRecord(id=uuid4().hex, title=title, messages=list(messages))
        self._chats[record.id] = record
        return record.model_copy(deep=True)

    async def update(self, chat_id: str, title: str, messages: list[StoredMessage]) -> ChatRecord:
        existing = self._chats.get(chat_id)
        if existing is None:
            raise ChatNotFoundError(chat_id)
        record = existing.model_copy(update={
            "title": title,
            "messages": list(messages),
            "updated_at": utcnow(),
        })
        self._chats[chat_id] = record
        return record.model_copy(deep=True)

    async def get(self, chat_id: str) -> ChatRecord:
        if chat_id not in self._chats:
            raise ChatNotFoundError(chat_id)
        return self._chats[chat_id].model_copy(deep=True)

    async def list_summaries(self) -> list[ChatSummary]:
        records = sorted(self._chats.values(), key=lambda r: r.updated_at, reverse=True)
        return [r.summary() for r in records]

    async def delete(self, chat_id: str) -> None:
        if self._chats.pop(chat_id, None) is None:
            raise ChatNotFoundError(chat_id)

    @property
    def backend_type(self) -> str:
        return "memory"
