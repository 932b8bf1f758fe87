"""Unit tests for render throttling."""
from hypothesis import given
from hypothesis import strategies as st

from notefusion.engine import ManualClock, RenderScheduler

INTERVAL = 50.0


class Recorder:
    """Publish callback recording when it ran and what the buffer held."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.buffer = ""
        self.published: list[tuple[float, str]] = []

    def __call__(self) -> None:
        self.published.append((self.clock.now(), self.buffer))


def make_scheduler(start: float = 0.0):
    clock = ManualClock(start)
    recorder = Recorder(clock)
    return clock, recorder, RenderScheduler(recorder, clock, interval=INTERVAL)


class TestRenderScheduler:
    """Tests for RenderScheduler."""

    def test_first_chunk_publishes_immediately(self):
        """Test that nothing throttles the very first update."""
        clock, recorder, scheduler = make_scheduler()
        recorder.buffer = "Hel"
        scheduler.on_chunk()

        assert recorder.published == [(0.0, "Hel")]
        assert not scheduler.pending_publish

    def test_chunk_inside_window_schedules_one_timer(self):
        """Test that arrivals inside the window share a single timer."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.on_chunk()

        for _ in range(5):
            clock.advance(5)
            scheduler.on_chunk()

        assert scheduler.pending_publish
        assert clock.pending == 1
        assert len(recorder.published) == 1

    def test_deferred_publish_reads_latest_buffer(self):
        """Test that the timer publishes the buffer as it is when it fires."""
        clock, recorder, scheduler = make_scheduler()
        recorder.buffer = "a"
        scheduler.on_chunk()

        clock.advance(10)
        recorder.buffer = "ab"
        scheduler.on_chunk()
        clock.advance(10)
        recorder.buffer = "abc"
        scheduler.on_chunk()

        clock.advance(30)

        assert recorder.published == [(0.0, "a"), (50.0, "abc")]
        assert not scheduler.pending_publish
        assert scheduler.last_published_at == 50.0

    def test_trailing_publish_fires_without_more_chunks(self):
        """Test that the scheduler never starves the last update."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.on_chunk()
        clock.advance(1)
        recorder.buffer = "tail"
        scheduler.on_chunk()

        clock.advance(1000)

        assert recorder.published[-1] == (50.0, "tail")

    def test_chunk_after_quiet_period_publishes_immediately(self):
        """Test that a full interval of silence re-enables immediate publish."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.on_chunk()
        clock.advance(INTERVAL)
        scheduler.on_chunk()

        assert [t for t, _ in recorder.published] == [0.0, 50.0]

    def test_flush_publishes_and_cancels_pending(self):
        """Test that the final publish bypasses the interval."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.on_chunk()
        clock.advance(10)
        recorder.buffer = "final"
        scheduler.on_chunk()

        scheduler.flush()
        clock.advance(100)

        assert recorder.published == [(0.0, ""), (10.0, "final")]
        assert clock.pending == 0

    def test_flush_is_final(self):
        """Test that nothing publishes after flush."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.flush()
        scheduler.on_chunk()
        scheduler.flush()

        assert len(recorder.published) == 1

    def test_cancel_drops_pending_publish(self):
        """Test that cancel prevents the deferred publish."""
        clock, recorder, scheduler = make_scheduler()
        scheduler.on_chunk()
        clock.advance(10)
        scheduler.on_chunk()

        scheduler.cancel()
        clock.advance(100)
        scheduler.on_chunk()

        assert len(recorder.published) == 1
        assert scheduler.publish_count == 1

    @given(st.lists(st.integers(min_value=0, max_value=40), min_size=1, max_size=40))
    def test_at_most_one_publish_per_interval(self, gaps: list[int]):
        """Property test: publishes are spaced by at least one interval, plus one final."""
        clock, recorder, scheduler = make_scheduler()
        for gap in gaps:
            clock.advance(gap)
            recorder.buffer += "x"
            scheduler.on_chunk()

        scheduler.flush()
        clock.advance(1000)

        times = [t for t, _ in recorder.published]
        intermediate = times[:-1]
        assert all(b - a >= INTERVAL for a, b in zip(intermediate, intermediate[1:]))
        assert recorder.published[-1][1] == "x" * len(gaps)
        assert scheduler.publish_count == len(recorder.published)

    @given(st.lists(st.integers(min_value=0, max_value=120), min_size=1, max_size=30))
    def test_publishes_never_regress(self, gaps: list[int]):
        """Property test: each publish covers at least as much as the one before."""
        clock, recorder, scheduler = make_scheduler()
        for gap in gaps:
            clock.advance(gap)
            recorder.buffer += "y"
            scheduler.on_chunk()
        clock.advance(1000)

        lengths = [len(buffer) for _, buffer in recorder.published]
        assert lengths == sorted(lengths)
        assert lengths[-1] == len(gaps)


class TestManualClock:
    """Tests for ManualClock."""

    def test_timers_fire_in_due_order(self):
        """Test ordering and the time seen by callbacks."""
        clock = ManualClock()
        fired = []
        clock.call_later(30, lambda: fired.append(("b", clock.now())))
        clock.call_later(10, lambda: fired.append(("a", clock.now())))

        clock.advance(50)

        assert fired == [("a", 10), ("b", 30)]
        assert clock.now() == 50

    def test_cancelled_timer_does_not_fire(self):
        """Test that cancel removes a timer."""
        clock = ManualClock()
        fired = []
        timer = clock.call_later(10, lambda: fired.append(1))
        timer.cancel()
        clock.advance(20)

        assert fired == []
        assert clock.pending == 0
