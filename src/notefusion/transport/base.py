"""Transport channel abstraction.

A transport opens one stream per request and reports what happens to it
through three callbacks. The engine never sees HTTP, SSE or SDK objects.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from .models import StreamRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamCallbacks:
    """Receivers for one stream's events.

    ``on_chunk`` is called in arrival order; exactly one of ``on_complete``
    or ``on_error`` follows unless the stream is aborted first.
    """

    on_chunk: Callable[[str], None]
    on_complete: Callable[[], None]
    on_error: Callable[[BaseException], None]


class StreamHandle(ABC):
    """Cancellation handle for an open stream."""

    @abstractmethod
    def abort(self) -> None:
        """Stop delivering callbacks. Safe to call more than once."""

    @property
    @abstractmethod
    def done(self) -> bool:
        """Whether the stream has finished, failed or been aborted."""


class TransportChannel(ABC):
    """Opens cancellable text streams."""

    @abstractmethod
    def open(self, request: StreamRequest, callbacks: StreamCallbacks) -> StreamHandle:
        """Start streaming ``request``; returns immediately."""

    async def close(self) -> None:
        """Release transport resources."""
        pass


class TaskStreamHandle(StreamHandle):
    """Handle over the asyncio task pumping a stream."""

    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    def abort(self) -> None:
        if not self._task.done():
            self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> None:
        """Wait for the pump task to end, aborted or not."""
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class AsyncIteratorTransport(TransportChannel):
    """Transport whose streams are async iterators of text.

    Subclasses implement ``iter_chunks``; this class runs it in a task on
    the current event loop and turns its outcome into callbacks.
    Cancellation of the task is the abort signal and produces no callback.
    """

    @abstractmethod
    def iter_chunks(self, request: StreamRequest) -> AsyncIterator[str]:
        """Yield text chunks for ``request`` in order."""

    def open(self, request: StreamRequest, callbacks: StreamCallbacks) -> TaskStreamHandle:
        task = asyncio.get_running_loop().create_task(self._pump(request, callbacks))
        return TaskStreamHandle(task)

    async def _pump(self, request: StreamRequest, callbacks: StreamCallbacks) -> None:
        try:
            async for chunk in self.iter_chunks(request):
                if chunk:
                    callbacks.on_chunk(chunk)
        except asyncio.CancelledError:
            logger.debug("Stream aborted")
            raise
        except Exception as e:
            logger.warning("Stream failed: %s", e)
            callbacks.on_error(e)
            return
        callbacks.on_complete()
