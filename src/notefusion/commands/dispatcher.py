"""Routing of parsed directives to the application's handlers."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .models import Command, CommandContext, CommandType
from .parser import parse_commands

logger = logging.getLogger(__name__)

DirectiveHandler = Callable[[Command, CommandContext], Awaitable[Any] | Any]


class CommandDispatcher:
    """Runs one handler per directive found in a completed response.

    Instances are callable with ``(raw_response, current_content)`` so they
    can be handed to the engine as its command handler. A failing handler
    is logged and does not stop the remaining directives.
    """

    def __init__(self) -> None:
        self._handlers: dict[CommandType, DirectiveHandler] = {}
        self._fallback: DirectiveHandler | None = None

    def register(self, command_type: CommandType, handler: DirectiveHandler) -> None:
        self._handlers[command_type] = handler

    def register_fallback(self, handler: DirectiveHandler) -> None:
        """Handler for directives without a dedicated one, unknown names included."""
        self._fallback = handler

    def handler_for(self, command: Command) -> DirectiveHandler | None:
        command_type = command.type
        if command_type is not None and command_type in self._handlers:
            return self._handlers[command_type]
        return self._fallback

    async def dispatch(self, raw_response: str, current_content: str = "") -> list[Command]:
        """Handle every directive in ``raw_response``.

        Returns:
            The directives whose handler ran without raising
        """
        context = CommandContext(raw_response=raw_response, current_content=current_content)
        handled = []

        for command in parse_commands(raw_response):
            handler = self.handler_for(command)
            if handler is None:
                logger.info("No handler for directive %s", command.name)
                continue
            try:
                result = handler(command, context)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Directive %s failed", command.name)
                continue
            handled.append(command)

        return handled

    async def __call__(self, raw_response: str, current_content: str = "") -> list[Command]:
        return await self.dispatch(raw_response, current_content)
