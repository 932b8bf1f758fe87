"""Main CLI application using Typer."""
import asyncio
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ..commands import Command, CommandContext, CommandDispatcher
from ..config import LogLevel
from ..engine import AssistantEngine, ChatSession
from ..notifications import ConsoleNotifier
from ..store import ChatSummary, Role
from .providers import get_store, get_transport

load_dotenv()

app = typer.Typer(
    name="notefusion",
    help="Streaming assistant sessions for Note Fusion",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()

CHAT_HELP = (
    "[dim]Commands: /new, /list, /load <id>, /delete <id>, /quit. "
    "Ctrl+C quits.[/dim]"
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=LogLevel.from_string(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _render_reply(session: ChatSession) -> Group | Text:
    if not session.messages or session.messages[-1].role != Role.ASSISTANT:
        return Text("")
    message = session.messages[-1]
    if message.is_streaming and not message.content:
        return Text("...", style="dim")
    return Group(Text("Assistant:", style="bold magenta"), Markdown(message.content))


def _print_directive(command: Command, context: CommandContext) -> None:
    console.print(f"[dim]Directive[/dim] [bold]{command.name}[/bold] {escape(str(command.payload))}")


async def _stream_reply(engine: AssistantEngine, text: str, document: str) -> None:
    with Live(Text("...", style="dim"), console=console, refresh_per_second=20) as live:
        unsubscribe = engine.subscribe(lambda session: live.update(_render_reply(session)))
        try:
            engine.send(text, current_content=document)
            await engine.wait_for_stream()
        except asyncio.CancelledError:
            engine.cancel_active()
            raise
        finally:
            unsubscribe()


def _print_sessions(summaries: list[ChatSummary]) -> None:
    if not summaries:
        console.print("[yellow]No saved chats[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Updated", style="green")
    for summary in summaries:
        table.add_row(summary.id, summary.title, summary.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


async def _handle_slash(engine: AssistantEngine, line: str) -> bool:
    """Run a /command. Returns False when the chat should end."""
    name, _, argument = line[1:].partition(" ")
    argument = argument.strip()

    if name in ("quit", "exit"):
        return False
    if name == "new":
        engine.new_session()
        console.print("[dim]Started a new chat.[/dim]")
    elif name == "list":
        _print_sessions(await engine.list_sessions())
    elif name == "load" and argument:
        if await engine.load_session(argument):
            _print_transcript(engine.session)
    elif name == "delete" and argument:
        await engine.delete_session(argument)
    else:
        console.print(CHAT_HELP)
    return True


def _print_transcript(session: ChatSession) -> None:
    console.print(f"[bold]{escape(session.title)}[/bold] [dim]({session.id or 'unsaved'})[/dim]")
    for message in session.messages:
        if message.role == Role.USER:
            console.print(f"[bold cyan]You:[/bold cyan] {escape(message.content)}")
        else:
            console.print("[bold magenta]Assistant:[/bold magenta]")
            console.print(Markdown(message.content))


@app.command()
def chat(
    session_id: str | None = typer.Option(
        None,
        "--session",
        "-s",
        help="Continue a saved chat"
    ),
    document: Path | None = typer.Option(
        None,
        "--document",
        "-d",
        exists=True,
        dir_okay=False,
        help="Note file sent along with every message"
    ),
    store_backend: str | None = typer.Option(
        None,
        "--store",
        help="Chat store: memory, sqlite or http (default: NOTEFUSION_STORE or sqlite)"
    ),
    db_path: str | None = typer.Option(
        None,
        "--db-path",
        help="SQLite file for the sqlite store"
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error"
    ),
):
    """Interactive chat with the assistant."""
    _configure_logging(log_level)

    async def _chat():
        store = get_store(store_backend, db_path)
        transport = get_transport(console)

        dispatcher = CommandDispatcher()
        dispatcher.register_fallback(_print_directive)

        try:
            await store.connect()
            async with AssistantEngine(
                transport,
                store,
                notifier=ConsoleNotifier(console),
                command_handler=dispatcher,
            ) as engine:
                if session_id and await engine.load_session(session_id):
                    _print_transcript(engine.session)

                console.print(CHAT_HELP)
                while True:
                    text = await asyncio.to_thread(console.input, "[bold cyan]You>[/bold cyan] ")
                    if text.startswith("/"):
                        if not await _handle_slash(engine, text.strip()):
                            break
                        continue

                    content = document.read_text(encoding="utf-8") if document else ""
                    await _stream_reply(engine, text, content)
                    await engine.drain()

        except (EOFError, KeyboardInterrupt):
            console.print()
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await transport.close()
            await store.disconnect()

    asyncio.run(_chat())


@app.command()
def sessions(
    store_backend: str | None = typer.Option(None, "--store", help="Chat store backend"),
    db_path: str | None = typer.Option(None, "--db-path", help="SQLite file for the sqlite store"),
):
    """List saved chats, most recent first."""
    async def _sessions():
        store = get_store(store_backend, db_path)
        try:
            await store.connect()
            summaries = await store.list_summaries()
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

        _print_sessions(summaries)

    asyncio.run(_sessions())


@app.command()
def show(
    chat_id: str = typer.Argument(..., help="Chat id"),
    store_backend: str | None = typer.Option(None, "--store", help="Chat store backend"),
    db_path: str | None = typer.Option(None, "--db-path", help="SQLite file for the sqlite store"),
):
    """Print a saved chat."""
    async def _show():
        store = get_store(store_backend, db_path)
        try:
            await store.connect()
            record = await store.get(chat_id)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

        _print_transcript(ChatSession.from_record(record))

    asyncio.run(_show())


@app.command()
def delete(
    chat_id: str = typer.Argument(..., help="Chat id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    store_backend: str | None = typer.Option(None, "--store", help="Chat store backend"),
    db_path: str | None = typer.Option(None, "--db-path", help="SQLite file for the sqlite store"),
):
    """Delete a saved chat."""
    async def _delete():
        if not yes:
            confirm = typer.confirm(f"Delete chat {chat_id}?")
            if not confirm:
                console.print("[dim]Aborted.[/dim]")
                return

        store = get_store(store_backend, db_path)
        try:
            await store.connect()
            await store.delete(chat_id)
            console.print("[green]Chat deleted successfully[/green]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_delete())


def main() -> None:
    app()
