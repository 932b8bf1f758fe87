"""Data models for persisted chats.

These models define the stored shape of a chat session, independent of
the storage backend used.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class StoredMessage(BaseModel):
    """A message as persisted: streaming state is never stored."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=utcnow)


class ChatRecord(BaseModel):
    """A persisted chat session."""

    id: str
    title: str
    messages: list[StoredMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def summary(self) -> "ChatSummary":
        return ChatSummary(id=self.id, title=self.title, updated_at=self.updated_at)


class ChatSummary(BaseModel):
    """Listing entry for a persisted chat."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    updated_at: datetime
