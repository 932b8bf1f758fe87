"""Streaming assistant session engine."""

from .aggregator import StreamAggregator
from .cancellation import CancellationCoordinator, StreamState
from .clock import Clock, LoopClock, ManualClock
from .filtering import clean
from .models import ChatSession, Message
from .persistence import SessionPersistence, derive_title, describe_error
from .scheduler import RenderScheduler
from .session import AssistantEngine

__all__ = [
    "AssistantEngine",
    "CancellationCoordinator",
    "ChatSession",
    "Clock",
    "LoopClock",
    "ManualClock",
    "Message",
    "RenderScheduler",
    "SessionPersistence",
    "StreamAggregator",
    "StreamState",
    "clean",
    "derive_title",
    "describe_error",
]
