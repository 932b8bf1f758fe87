"""Streaming assistant session engine.

Drives one conversation: opens a transport stream per user message, renders
the growing response under a throttle, strips directive lines from what the
user sees, and saves the transcript once per completed turn.

Everything runs on one asyncio event loop. Transport callbacks, scheduler
timers and store writes interleave but never run in parallel, so the only
protection needed is the stream-id liveness check on every callback.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any
from uuid import uuid4

from ..config import (
    DELETE_FAILED_TOAST,
    DELETE_SUCCESS_TOAST,
    LIST_FAILED_TOAST,
    LOAD_FAILED_TOAST,
    STREAM_FAILED_TOAST,
    UPDATE_INTERVAL,
)
from ..notifications import Notifier, ToastQueue
from ..store.base import ChatStore
from ..store.models import ChatSummary, Role
from ..transport.base import StreamCallbacks, TransportChannel
from ..transport.models import StreamRequest
from .aggregator import StreamAggregator
from .cancellation import CancellationCoordinator, StreamState
from .clock import Clock, LoopClock
from .filtering import clean
from .models import ChatSession, Message
from .persistence import SessionPersistence, derive_title
from .scheduler import RenderScheduler

logger = logging.getLogger(__name__)

CommandHandler = Callable[[str, str], Awaitable[Any] | Any]
SessionListener = Callable[[ChatSession], None]


class AssistantEngine:
    """Hosting-UI facing engine for one assistant panel.

    Usage:
        async with AssistantEngine(transport, store) as engine:
            engine.send("Summarize this note", current_content=note)
            await engine.wait_for_stream()
            await engine.drain()
    """

    def __init__(
        self,
        transport: TransportChannel,
        store: ChatStore,
        notifier: Notifier | None = None,
        command_handler: CommandHandler | None = None,
        clock: Clock | None = None,
        update_interval: float = UPDATE_INTERVAL,
        session: ChatSession | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            transport: Channel used to open one stream per send
            store: Chat store for saving, loading and deleting sessions
            notifier: Receives transient user notifications
            command_handler: Called after completion with the raw response
                (directives included) and the document sent with the turn
            clock: Time source for render throttling (event loop by default)
            update_interval: Minimum seconds between visible updates
            session: Session to continue (a new one by default)
        """
        self._transport = transport
        self._store = store
        self._notifier = notifier or ToastQueue()
        self._command_handler = command_handler
        self._clock = clock or LoopClock()
        self._update_interval = update_interval
        self._session = session or ChatSession()
        self._coordinator = CancellationCoordinator()
        self._persistence = SessionPersistence(store, self._notifier)
        self._listeners: list[SessionListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    # Read model

    @property
    def session(self) -> ChatSession:
        return self._session

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._session.messages)

    @property
    def is_streaming(self) -> bool:
        """Whether a stream is active (input should be disabled)."""
        return self._coordinator.live is not None

    @property
    def active_stream_id(self) -> str | None:
        live = self._coordinator.live
        return live.stream_id if live is not None else None

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` after every visible change; returns an unsubscribe function."""
        self._listeners.append(listener)
        return partial(self._unsubscribe, listener)

    def _unsubscribe(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._session)
            except Exception:
                logger.exception("Session listener failed")

    # Sending

    def send(self, text: str, current_content: str = "") -> str | None:
        """Send a user message and start streaming the reply.

        Any active stream is aborted first. Returns the new stream id, or
        None when ``text`` is blank.
        """
        if not text.strip():
            return None

        self._settle_interrupted(self._coordinator.abort_active())

        session = self._session
        if not session.messages:
            session.title = derive_title(text)

        user_message = Message(role=Role.USER, content=text)
        request = StreamRequest(
            message=text,
            history=[*session.history(), user_message.to_chat_message()],
            current_content=current_content,
        )

        stream_id = uuid4().hex
        reply = Message(role=Role.ASSISTANT, stream_id=stream_id, is_streaming=True)
        session.messages.extend([user_message, reply])

        aggregator = StreamAggregator()
        scheduler = RenderScheduler(
            partial(self._publish, reply, aggregator),
            self._clock,
            self._update_interval,
        )
        aggregator.on_append = scheduler.on_chunk
        state = StreamState(
            stream_id=stream_id,
            session=session,
            message=reply,
            request=request,
            aggregator=aggregator,
            scheduler=scheduler,
        )
        self._coordinator.start(state)
        self._idle.clear()
        self._emit()

        callbacks = StreamCallbacks(
            on_chunk=partial(self._on_chunk, stream_id),
            on_complete=partial(self._on_complete, stream_id),
            on_error=partial(self._on_error, stream_id),
        )
        try:
            handle = self._transport.open(request, callbacks)
        except Exception as e:
            logger.error("Failed to open stream: %s", e)
            self._on_error(stream_id, e)
            return stream_id

        if self._coordinator.is_live(stream_id):
            state.handle = handle
        else:
            # Finished or superseded during open
            handle.abort()
        logger.debug("Opened stream %s", stream_id)
        return stream_id

    def _publish(self, message: Message, aggregator: StreamAggregator) -> None:
        message.content = clean(aggregator.raw)
        self._emit()

    def _on_chunk(self, stream_id: str, text: str) -> None:
        state = self._coordinator.get(stream_id)
        if state is None:
            logger.debug("Dropping chunk of stale stream %s", stream_id)
            return
        state.aggregator.append(text)

    def _on_complete(self, stream_id: str) -> None:
        state = self._coordinator.release(stream_id)
        if state is None or state.terminal:
            return
        state.terminal = True

        raw = state.aggregator.raw
        state.scheduler.flush()
        self._persistence.complete(state.message, clean(raw))
        logger.debug(
            "Stream %s completed: %d chunks, %d chars",
            stream_id, state.aggregator.chunk_count, len(state.aggregator),
        )

        session = state.session
        self._spawn(self._persistence.save(session, session.stored_messages(), session.title))
        if self._command_handler is not None:
            self._spawn(self._run_command_handler(raw, state.request.current_content))

        self._idle.set()
        self._emit()

    def _on_error(self, stream_id: str, error: BaseException) -> None:
        state = self._coordinator.release(stream_id)
        if state is None or state.terminal:
            return
        state.terminal = True

        state.scheduler.cancel()
        logger.error("Streaming error: %s", error)
        self._persistence.fail(state.message, error)
        self._notifier.error(STREAM_FAILED_TOAST)

        self._idle.set()
        self._emit()

    def _settle_interrupted(self, state: StreamState | None) -> None:
        """Freeze the message of an aborted stream at what has arrived."""
        if state is None:
            return
        message = state.message
        message.content = clean(state.aggregator.raw)
        message.is_streaming = False
        message.stream_id = None
        # Nothing arrived: the placeholder carries no turn worth keeping
        if not message.content:
            state.session.messages[:] = [m for m in state.session.messages if m is not message]

    async def _run_command_handler(self, raw: str, current_content: str) -> None:
        try:
            result = self._command_handler(raw, current_content)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Error in command parsing")

    def _spawn(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # Session management

    def cancel_active(self) -> bool:
        """Abort the active stream, keeping what it already displayed."""
        state = self._coordinator.abort_active()
        if state is None:
            return False
        self._settle_interrupted(state)
        self._idle.set()
        self._emit()
        return True

    def new_session(self) -> ChatSession:
        self.cancel_active()
        self._session = ChatSession()
        self._emit()
        return self._session

    async def load_session(self, chat_id: str) -> bool:
        self.cancel_active()
        try:
            record = await self._store.get(chat_id)
        except Exception as e:
            logger.error("Error loading chat %s: %s", chat_id, e)
            self._notifier.error(LOAD_FAILED_TOAST)
            return False
        self._session = ChatSession.from_record(record)
        self._emit()
        return True

    async def delete_session(self, chat_id: str) -> bool:
        try:
            await self._store.delete(chat_id)
        except Exception as e:
            logger.error("Error deleting chat %s: %s", chat_id, e)
            self._notifier.error(DELETE_FAILED_TOAST)
            return False
        if self._session.id == chat_id:
            self.new_session()
        self._notifier.success(DELETE_SUCCESS_TOAST)
        return True

    async def list_sessions(self) -> list[ChatSummary]:
        try:
            return await self._store.list_summaries()
        except Exception as e:
            logger.error("Error loading chats: %s", e)
            self._notifier.error(LIST_FAILED_TOAST)
            return []

    # Lifecycle

    async def wait_for_stream(self) -> None:
        """Wait until no stream is active."""
        await self._idle.wait()

    async def drain(self) -> None:
        """Wait for pending saves and command handling."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        """Tear down: abort any stream and finish background work."""
        self.cancel_active()
        await self.drain()

    async def __aenter__(self) -> "AssistantEngine":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
