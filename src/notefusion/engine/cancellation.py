"""Single-live-stream bookkeeping.

Liveness is decided by stream id: a callback whose id is not the live one
belongs to a superseded or finished stream and must not touch the session.
"""

import logging
from dataclasses import dataclass

from ..transport.base import StreamHandle
from ..transport.models import StreamRequest
from .aggregator import StreamAggregator
from .models import ChatSession, Message
from .scheduler import RenderScheduler

logger = logging.getLogger(__name__)


@dataclass
class StreamState:
    """Transient state of one send; discarded once terminal."""

    stream_id: str
    session: ChatSession
    message: Message
    request: StreamRequest
    aggregator: StreamAggregator
    scheduler: RenderScheduler
    handle: StreamHandle | None = None
    terminal: bool = False

    def abort(self) -> None:
        self.scheduler.cancel()
        if self.handle is not None:
            self.handle.abort()


class CancellationCoordinator:
    """Keeps at most one live stream per engine."""

    def __init__(self) -> None:
        self._live: StreamState | None = None

    @property
    def live(self) -> StreamState | None:
        return self._live

    def start(self, state: StreamState) -> StreamState | None:
        """Register ``state`` as the live stream.

        Any previously live stream is aborted first and returned so the
        caller can settle its message.
        """
        previous = self.abort_active()
        self._live = state
        return previous

    def get(self, stream_id: str) -> StreamState | None:
        """The live state if ``stream_id`` is still the live stream."""
        if self._live is not None and self._live.stream_id == stream_id:
            return self._live
        return None

    def is_live(self, stream_id: str) -> bool:
        return self.get(stream_id) is not None

    def release(self, stream_id: str) -> StreamState | None:
        """Retire the live stream after its terminal callback.

        Returns None when ``stream_id`` is not live, in which case the
        callback must be ignored.
        """
        state = self.get(stream_id)
        if state is None:
            logger.debug("Ignoring terminal callback of stale stream %s", stream_id)
            return None
        self._live = None
        return state

    def abort_active(self) -> StreamState | None:
        """Abort and discard the live stream, if any."""
        state = self._live
        if state is None:
            return None
        self._live = None
        logger.debug("Aborting stream %s", state.stream_id)
        state.abort()
        state.terminal = True
        return state
