"""
Notefusion: the streaming assistant session engine of Note Fusion.

Streams assistant replies from an LLM backend, throttles what is shown,
hides embedded directives and saves each completed exchange.
"""

__version__ = "0.1.0"

from .engine import AssistantEngine, ChatSession, Message, clean, derive_title
from .store import Role, create_chat_store
from .transport import StreamRequest, create_transport

__all__ = [
    "AssistantEngine",
    "ChatSession",
    "Message",
    "Role",
    "StreamRequest",
    "clean",
    "create_chat_store",
    "create_transport",
    "derive_title",
]
