"""Embedded directive protocol.

Assistant responses may carry ``COMMAND:<TYPE>: {json}`` lines addressed to
the client. They are hidden from display and handled after completion.
"""

from .dispatcher import CommandDispatcher, DirectiveHandler
from .models import Command, CommandContext, CommandType
from .parser import parse_commands

__all__ = [
    "Command",
    "CommandContext",
    "CommandDispatcher",
    "CommandType",
    "DirectiveHandler",
    "parse_commands",
]
