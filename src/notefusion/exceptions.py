"""
Custom exceptions for notefusion.
"""

from typing import Any


class NotefusionError(Exception):
    """Base exception for notefusion."""

    def __init__(self, message: str, details: Any | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class TransportError(NotefusionError):
    """A stream could not be opened or died mid-flight."""

    pass


class StoreError(NotefusionError):
    """A chat store operation failed."""

    pass


class ChatNotFoundError(StoreError):
    """Chat record not found."""

    def __init__(self, chat_id: str):
        super().__init__(f"Chat not found: {chat_id}", details={"chat_id": chat_id})
        self.chat_id = chat_id
