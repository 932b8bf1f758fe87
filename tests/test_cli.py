"""Tests for the command-line interface."""
import asyncio
import sys

import pytest
import typer
from typer.testing import CliRunner

from notefusion.cli import app
from notefusion.cli.providers import get_llm, get_store, get_transport
from notefusion.llm import DeepSeekProvider
from notefusion.store.models import Role, StoredMessage
from notefusion.store.sqlite import SQLiteChatStore
from notefusion.transport import AsyncIteratorTransport, StreamRequest
from notefusion.transport.provider import ProviderTransport
from notefusion.transport.sse import SSETransport

runner = CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "LLM_PROVIDER", "OPENAI_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY",
        "DEEPSEEK_MODEL", "NOTEFUSION_STORE", "NOTEFUSION_DB_PATH",
        "NOTEFUSION_TRANSPORT", "NOTEFUSION_API_URL", "NOTEFUSION_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def saved_chat(tmp_path):
    """A SQLite file holding one chat; returns (path, chat id)."""
    path = tmp_path / "chats.db"

    async def seed():
        store = SQLiteChatStore(path)
        await store.connect()
        try:
            record = await store.create("Recursion", [
                StoredMessage(role=Role.USER, content="Explain recursion"),
                StoredMessage(role=Role.ASSISTANT, content="A function calling itself."),
            ])
        finally:
            await store.disconnect()
        return record.id

    return str(path), asyncio.run(seed())


class TestCommands:
    """Tests for the session management commands."""

    def test_sessions_lists_saved_chats(self, saved_chat):
        path, chat_id = saved_chat
        result = runner.invoke(app, ["sessions", "--store", "sqlite", "--db-path", path])

        assert result.exit_code == 0
        assert "Recursion" in result.output

    def test_sessions_empty(self, tmp_path):
        result = runner.invoke(app, ["sessions", "--store", "sqlite", "--db-path", str(tmp_path / "empty.db")])

        assert result.exit_code == 0
        assert "No saved chats" in result.output

    def test_show_prints_transcript(self, saved_chat):
        path, chat_id = saved_chat
        result = runner.invoke(app, ["show", chat_id, "--store", "sqlite", "--db-path", path])

        assert result.exit_code == 0
        assert "Explain recursion" in result.output
        assert "A function calling itself." in result.output

    def test_show_unknown_chat_fails(self, saved_chat):
        path, _ = saved_chat
        result = runner.invoke(app, ["show", "missing", "--store", "sqlite", "--db-path", path])

        assert result.exit_code == 1
        assert "Chat not found" in result.output

    def test_delete_with_confirmation_flag(self, saved_chat):
        path, chat_id = saved_chat
        result = runner.invoke(app, ["delete", chat_id, "--yes", "--store", "sqlite", "--db-path", path])

        assert result.exit_code == 0
        assert "Chat deleted successfully" in result.output
        listing = runner.invoke(app, ["sessions", "--store", "sqlite", "--db-path", path])
        assert "No saved chats" in listing.output

    def test_delete_aborted(self, saved_chat):
        path, chat_id = saved_chat
        result = runner.invoke(app, ["delete", chat_id, "--store", "sqlite", "--db-path", path], input="n\n")

        assert "Aborted" in result.output


class ScriptedReplyTransport(AsyncIteratorTransport):
    """Answers every message with the same reply."""

    def __init__(self, *chunks):
        self.chunks = chunks
        self.requests: list[StreamRequest] = []
        self.closed = False

    async def iter_chunks(self, request):
        self.requests.append(request)
        for chunk in self.chunks:
            yield chunk

    async def close(self):
        self.closed = True


@pytest.fixture
def chat_transport(monkeypatch):
    transport = ScriptedReplyTransport("Hi ", "there!\n", 'COMMAND:CREATE_NOTE: {"title": "Plan"}')
    cli_app_module = sys.modules["notefusion.cli.app"]
    monkeypatch.setattr(cli_app_module, "get_transport", lambda console: transport)
    monkeypatch.setattr(cli_app_module, "_configure_logging", lambda level: None)
    return transport


class TestChat:
    """Tests for the interactive chat command."""

    def test_message_then_slash_commands(self, chat_transport):
        """Test one streamed turn followed by /list, /new and /quit."""
        result = runner.invoke(
            app, ["chat", "--store", "memory"], input="Hello\n/list\n/new\n/quit\n"
        )

        assert result.exit_code == 0
        assert [r.message for r in chat_transport.requests] == ["Hello"]
        assert "CREATE_NOTE" in result.output
        assert "Hello" in result.output
        assert "No saved chats" not in result.output
        assert "Started a new chat." in result.output
        assert chat_transport.closed

    def test_document_sent_with_message(self, chat_transport, tmp_path):
        """Test that --document contents go out with each message."""
        note = tmp_path / "note.md"
        note.write_text("# Groceries", encoding="utf-8")

        result = runner.invoke(
            app, ["chat", "--store", "memory", "--document", str(note)], input="Tidy this\n/quit\n"
        )

        assert result.exit_code == 0
        assert chat_transport.requests[0].current_content == "# Groceries"

    def test_end_of_input_quits(self, chat_transport):
        """Test that closing stdin ends the chat cleanly."""
        result = runner.invoke(app, ["chat", "--store", "memory"], input="/list\n")

        assert result.exit_code == 0
        assert "No saved chats" in result.output
        assert chat_transport.requests == []

    def test_unknown_slash_command_shows_help(self, chat_transport):
        result = runner.invoke(app, ["chat", "--store", "memory"], input="/help\n/quit\n")

        assert result.exit_code == 0
        # Once at start, once for the unknown command
        assert result.output.count("/load <id>") == 2


class TestProviders:
    """Tests for environment-driven collaborator creation."""

    def test_store_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("NOTEFUSION_DB_PATH", str(tmp_path / "env.db"))

        store = get_store()

        assert store.backend_type == "sqlite"
        assert store.db_path == tmp_path / "env.db"
        assert get_store("memory").backend_type == "memory"

    def test_http_store(self, clean_env):
        clean_env.setenv("NOTEFUSION_STORE", "http")
        assert get_store().backend_type == "http"

    def test_llm_requires_key(self, clean_env):
        assert get_llm() is None

    def test_llm_from_environment(self, clean_env):
        clean_env.setenv("DEEPSEEK_API_KEY", "fake-key")
        clean_env.setenv("DEEPSEEK_MODEL", "deepseek-reasoner")

        llm = get_llm()

        assert isinstance(llm, DeepSeekProvider)
        assert llm.model == "deepseek-reasoner"

    def test_unknown_llm_provider(self, clean_env):
        clean_env.setenv("LLM_PROVIDER", "llama")
        assert get_llm() is None

    def test_provider_transport(self, clean_env):
        clean_env.setenv("DEEPSEEK_API_KEY", "fake-key")

        transport = get_transport()

        assert isinstance(transport, ProviderTransport)
        system = transport.build_messages(StreamRequest(message="Hi"))[0]
        assert system.role == "system"
        assert "COMMAND:" in system.content

    def test_provider_transport_without_llm_exits(self, clean_env):
        with pytest.raises(typer.Exit):
            get_transport()

    def test_sse_transport(self, clean_env):
        clean_env.setenv("NOTEFUSION_TRANSPORT", "sse")
        clean_env.setenv("NOTEFUSION_API_URL", "http://backend.test")

        transport = get_transport()

        assert isinstance(transport, SSETransport)
        assert transport.url == "http://backend.test/api/ai/chat/stream"
