"""Throttled publishing of a streaming message."""

import logging
from collections.abc import Callable

from ..config import UPDATE_INTERVAL
from .clock import Clock, TimerHandle

logger = logging.getLogger(__name__)


class RenderScheduler:
    """Decides when the visible content of a streaming message is refreshed.

    Each chunk arrival is one evaluation. A publish happens immediately when
    at least ``interval`` has passed since the last one; otherwise a single
    deferred publish is scheduled for the end of the window. While that
    timer is pending, further arrivals do nothing: the timer publishes
    whatever the buffer holds when it fires. ``flush`` is the unconditional
    final publish on completion.

    ``publish`` is called without arguments and must read the current
    buffer itself.
    """

    def __init__(
        self,
        publish: Callable[[], None],
        clock: Clock,
        interval: float = UPDATE_INTERVAL,
    ) -> None:
        self._publish = publish
        self._clock = clock
        self._interval = interval
        self._last_published_at = float("-inf")
        self._timer: TimerHandle | None = None
        self._closed = False
        self.publish_count = 0

    @property
    def pending_publish(self) -> bool:
        return self._timer is not None

    @property
    def last_published_at(self) -> float:
        return self._last_published_at

    def on_chunk(self) -> None:
        """Evaluate after a chunk has been appended to the buffer."""
        if self._closed or self._timer is not None:
            return

        now = self._clock.now()
        elapsed = now - self._last_published_at
        if elapsed >= self._interval:
            self._do_publish(now)
        else:
            self._timer = self._clock.call_later(self._interval - elapsed, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        self._do_publish(self._clock.now())

    def _do_publish(self, now: float) -> None:
        self._last_published_at = now
        self.publish_count += 1
        self._publish()

    def flush(self) -> None:
        """Publish the final state now, bypassing the interval check."""
        if self._closed:
            logger.debug("flush() on a closed scheduler ignored")
            return
        self._cancel_timer()
        self._do_publish(self._clock.now())
        self._closed = True

    def cancel(self) -> None:
        """Drop any pending publish; no further publishes happen."""
        self._cancel_timer()
        self._closed = True

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
