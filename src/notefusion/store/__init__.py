"""Chat store module for notefusion.

Provides persistent storage of chat sessions.
"""

from .base import ChatStore
from .factory import create_chat_store
from .models import ChatRecord, ChatSummary, Role, StoredMessage

__all__ = [
    "ChatRecord",
    "ChatStore",
    "ChatSummary",
    "Role",
    "StoredMessage",
    "create_chat_store",
]
