from .base import (
    AsyncIteratorTransport,
    StreamCallbacks,
    StreamHandle,
    TaskStreamHandle,
    TransportChannel,
)
from .factory import create_transport
from .models import StreamRequest

__all__ = [
    "AsyncIteratorTransport",
    "StreamCallbacks",
    "StreamHandle",
    "StreamRequest",
    "TaskStreamHandle",
    "TransportChannel",
    "create_transport",
]
