"""Data models for the in-memory conversation.

A ChatSession is owned by the engine driving it; messages are mutated in
place while an assistant turn streams.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import DEFAULT_CHAT_TITLE
from ..llm.models import ChatMessage
from ..store.models import ChatRecord, Role, StoredMessage, utcnow


class Message(BaseModel):
    """One turn of the conversation."""

    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    stream_id: str | None = Field(default=None, description="Set only while a stream populates this message")
    is_streaming: bool = False

    def to_stored(self) -> StoredMessage:
        return StoredMessage(role=self.role, content=self.content, timestamp=self.timestamp)

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(role=self.role.value, content=self.content)


class ChatSession(BaseModel):
    """One conversation.

    Invariants:
    - ``id`` is assigned once, by the first successful save
    - at most one message is streaming and it is the last one
    """

    id: str | None = None
    title: str = DEFAULT_CHAT_TITLE
    messages: list[Message] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_record(cls, record: ChatRecord) -> "ChatSession":
        return cls(
            id=record.id,
            title=record.title,
            messages=[
                Message(role=m.role, content=m.content, timestamp=m.timestamp)
                for m in record.messages
            ],
            updated_at=record.updated_at,
        )

    @property
    def streaming_message(self) -> Message | None:
        """The message currently being populated by a stream, if any."""
        if self.messages and self.messages[-1].is_streaming:
            return self.messages[-1]
        return None

    def stored_messages(self) -> list[StoredMessage]:
        return [m.to_stored() for m in self.messages]

    def history(self) -> list[ChatMessage]:
        """Role/content pairs for a transport request."""
        return [m.to_chat_message() for m in self.messages]
