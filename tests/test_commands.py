"""Tests for the embedded directive protocol."""
import logging

import pytest

from notefusion.commands import (
    CommandDispatcher,
    CommandType,
    parse_commands,
)

RESPONSE = "\n".join([
    "I've created the folder and note for you.",
    'COMMAND:CREATE_FOLDER: {"name": "Work"}',
    '  COMMAND:CREATE_NOTE: {"title": "Plan", "content": "# Plan", "folder": "Work"}  ',
    "Let me know if you need anything else.",
])


class TestParseCommands:
    """Tests for parse_commands()."""

    def test_parses_directives_in_order(self):
        """Test name, payload and trimmed source line."""
        commands = parse_commands(RESPONSE)

        assert [c.type for c in commands] == [CommandType.CREATE_FOLDER, CommandType.CREATE_NOTE]
        assert commands[0].payload == {"name": "Work"}
        assert commands[1].payload["folder"] == "Work"
        assert commands[1].line.startswith("COMMAND:CREATE_NOTE:")

    def test_no_marker(self):
        assert parse_commands("Just text\nno directives") == []

    def test_invalid_json_skipped_with_warning(self, caplog):
        """Test that a broken payload is skipped and logged."""
        raw = 'COMMAND:DELETE_NOTE: {"title": oops}\nCOMMAND:DELETE_FOLDER: {"name": "Old"}'

        with caplog.at_level(logging.WARNING):
            commands = parse_commands(raw)

        assert [c.name for c in commands] == ["DELETE_FOLDER"]
        assert "Invalid JSON" in caplog.text

    def test_marker_without_shape_skipped(self):
        """Test that marker lines not shaped NAME: {json} are ignored."""
        assert parse_commands("COMMAND: insert_heading") == []
        assert parse_commands("COMMAND:create_note: {}") == []

    def test_unknown_name_kept(self):
        """Test that unrecognised directives parse with no type."""
        (command,) = parse_commands('COMMAND:SHARE_NOTE: {"title": "x"}')

        assert command.name == "SHARE_NOTE"
        assert command.type is None


class TestCommandDispatcher:
    """Tests for CommandDispatcher."""

    @pytest.mark.asyncio
    async def test_routes_to_registered_handlers(self):
        """Test sync and async handlers with the response context."""
        seen = []
        dispatcher = CommandDispatcher()

        async def create_note(command, context):
            seen.append(("note", command.payload["title"], context.current_content))

        dispatcher.register(CommandType.CREATE_FOLDER, lambda c, ctx: seen.append(("folder", c.payload["name"])))
        dispatcher.register(CommandType.CREATE_NOTE, create_note)

        handled = await dispatcher.dispatch(RESPONSE, current_content="doc")

        assert seen == [("folder", "Work"), ("note", "Plan", "doc")]
        assert len(handled) == 2

    @pytest.mark.asyncio
    async def test_fallback_and_unhandled(self):
        """Test the fallback handler and directives nobody handles."""
        dispatcher = CommandDispatcher()
        assert await dispatcher(RESPONSE) == []

        names = []
        dispatcher.register_fallback(lambda c, ctx: names.append(c.name))
        raw = RESPONSE + '\nCOMMAND:SHARE_NOTE: {"title": "x"}'

        handled = await dispatcher(raw)

        assert names == ["CREATE_FOLDER", "CREATE_NOTE", "SHARE_NOTE"]
        assert len(handled) == 3

    @pytest.mark.asyncio
    async def test_failing_handler_isolated(self, caplog):
        """Test that one failing directive does not stop the others."""
        dispatcher = CommandDispatcher()
        done = []

        def broken(command, context):
            raise RuntimeError("folder exists")

        dispatcher.register(CommandType.CREATE_FOLDER, broken)
        dispatcher.register(CommandType.CREATE_NOTE, lambda c, ctx: done.append(c.name))

        with caplog.at_level(logging.ERROR):
            handled = await dispatcher.dispatch(RESPONSE)

        assert done == ["CREATE_NOTE"]
        assert [c.name for c in handled] == ["CREATE_NOTE"]
        assert "Directive CREATE_FOLDER failed" in caplog.text
