"""Pytest configuration and shared fixtures."""
import asyncio
import os

import pytest

from notefusion.engine import AssistantEngine, ManualClock
from notefusion.exceptions import StoreError
from notefusion.notifications import ToastQueue
from notefusion.store.in_memory import InMemoryChatStore
from notefusion.transport import StreamCallbacks, StreamHandle, StreamRequest, TransportChannel

UPDATE_INTERVAL = 0.05


class FakeHandle(StreamHandle):
    """Stream whose events are driven by the test.

    Events can still be delivered after ``abort`` to simulate callbacks that
    were already in flight.
    """

    def __init__(self, request: StreamRequest, callbacks: StreamCallbacks):
        self.request = request
        self.callbacks = callbacks
        self.aborted = False
        self._done = False

    def abort(self) -> None:
        self.aborted = True
        self._done = True

    @property
    def done(self) -> bool:
        return self._done

    def chunk(self, text: str) -> None:
        self.callbacks.on_chunk(text)

    def complete(self) -> None:
        self._done = True
        self.callbacks.on_complete()

    def fail(self, error: BaseException) -> None:
        self._done = True
        self.callbacks.on_error(error)


class FakeTransport(TransportChannel):
    def __init__(self):
        self.handles: list[FakeHandle] = []

    def open(self, request: StreamRequest, callbacks: StreamCallbacks) -> FakeHandle:
        handle = FakeHandle(request, callbacks)
        self.handles.append(handle)
        return handle

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


class RecordingStore(InMemoryChatStore):
    """In-memory store that counts writes and can fail or stall on demand."""

    def __init__(self):
        super().__init__()
        self.creates = 0
        self.updates = 0
        self.fail_writes = 0
        self.create_gate: asyncio.Event | None = None

    async def create(self, title, messages):
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.fail_writes:
            self.fail_writes -= 1
            raise StoreError("database unavailable")
        self.creates += 1
        return await super().create(title, messages)

    async def update(self, chat_id, title, messages):
        if self.fail_writes:
            self.fail_writes -= 1
            raise StoreError("database unavailable")
        self.updates += 1
        return await super().update(chat_id, title, messages)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "deepseek": os.getenv("DEEPSEEK_API_KEY"),
        "anthropic": os.getenv("ANTHROPIC_API_KEY"),
    }


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def toasts():
    return ToastQueue()


@pytest.fixture
def engine(transport, store, toasts, clock):
    return AssistantEngine(
        transport,
        store,
        notifier=toasts,
        clock=clock,
        update_interval=UPDATE_INTERVAL,
    )
