"""Finalization of a streamed turn and chat persistence."""

import asyncio
import logging

from ..config import (
    GENERIC_ERROR_MESSAGE,
    SAVE_FAILED_TOAST,
    TITLE_ELLIPSIS,
    TITLE_MAX_LENGTH,
)
from ..notifications import Notifier
from ..store.base import ChatStore
from ..store.models import StoredMessage
from .models import ChatSession, Message

logger = logging.getLogger(__name__)


def derive_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Title of a chat from its first user message.

    >>> derive_title("Hi")
    'Hi'
    >>> derive_title("Explain recursion in simple terms with an example")
    'Explain recursion in simple te...'
    """
    if len(text) > max_length:
        return text[:max_length] + TITLE_ELLIPSIS
    return text


def describe_error(error: BaseException | str | None) -> str:
    """Short user-facing text for a failed stream."""
    if isinstance(error, str):
        return error or GENERIC_ERROR_MESSAGE
    if error is None:
        return GENERIC_ERROR_MESSAGE
    message = getattr(error, "message", None) or str(error)
    return message.strip() or GENERIC_ERROR_MESSAGE


class SessionPersistence:
    """Turns terminal streams into message state and store writes.

    The first save of a session creates it and records the returned id;
    later saves update that id. Saves run one at a time so a slow create
    is never followed by a second create for the same session.
    """

    def __init__(self, store: ChatStore, notifier: Notifier) -> None:
        self._store = store
        self._notifier = notifier
        self._lock = asyncio.Lock()

    @property
    def store(self) -> ChatStore:
        return self._store

    def complete(self, message: Message, display: str) -> None:
        message.content = display
        message.is_streaming = False
        message.stream_id = None

    def fail(self, message: Message, error: BaseException | str | None) -> None:
        message.content = describe_error(error)
        message.is_streaming = False
        message.stream_id = None

    async def save(
        self,
        session: ChatSession,
        messages: list[StoredMessage] | None = None,
        title: str | None = None,
    ) -> bool:
        """Persist ``session``; failures are reported, not raised.

        Args:
            session: Session to persist; receives its id on first create
            messages: Snapshot taken at finalize time (defaults to the
                session's current messages)
            title: Title snapshot (defaults to the session's title)

        Returns:
            True when the store accepted the write
        """
        messages = session.stored_messages() if messages is None else messages
        title = session.title if title is None else title

        async with self._lock:
            try:
                if session.id is None:
                    if not messages:
                        return False
                    record = await self._store.create(title, messages)
                    session.id = record.id
                    logger.info("Created chat %s (%r)", record.id, title)
                else:
                    record = await self._store.update(session.id, title, messages)
                    logger.debug("Updated chat %s with %d messages", session.id, len(messages))
            except Exception as e:
                logger.error("Error saving chat: %s", e)
                self._notifier.error(SAVE_FAILED_TOAST)
                return False

        session.updated_at = record.updated_at
        return True
