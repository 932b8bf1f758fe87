"""Collaborator factory functions for the CLI.

Centralizes creation of the chat store, LLM provider and transport from
environment variables. Hides configuration details from commands.
"""

import os
from typing import Any

import typer
from rich.console import Console

from ..llm import LLMProvider, create_llm_provider
from ..prompts import get_system_prompt
from ..store import ChatStore, create_chat_store
from ..transport import TransportChannel, create_transport

_console = Console()

# Environment variable holding the API key of each provider
_API_KEY_VARS = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}

# Environment variable overriding the model of each provider
_MODEL_VARS = {
    "openai": "OPENAI_CHAT_MODEL",
    "deepseek": "DEEPSEEK_MODEL",
    "anthropic": "ANTHROPIC_MODEL",
    "claude": "ANTHROPIC_MODEL",
}


def get_store(backend: str | None = None, path: str | None = None) -> ChatStore:
    """Create the chat store.

    Environment variables:
        NOTEFUSION_STORE: memory, sqlite or http (default: sqlite)
        NOTEFUSION_DB_PATH: SQLite file (default: ./notefusion_chats.db)
        NOTEFUSION_API_URL: Backend URL for the http store (default: http://localhost:8000)
        NOTEFUSION_TOKEN: Bearer token for the http store
    """
    backend = (backend or os.getenv("NOTEFUSION_STORE", "sqlite")).lower()
    config: dict[str, Any] = {}

    if backend == "sqlite":
        config["path"] = path or os.getenv("NOTEFUSION_DB_PATH", "./notefusion_chats.db")
    elif backend == "http":
        config["api_url"] = os.getenv("NOTEFUSION_API_URL", "http://localhost:8000")
        config["token"] = os.getenv("NOTEFUSION_TOKEN")

    return create_chat_store(backend, **config)


def get_llm(console: Console | None = None) -> LLMProvider | None:
    """Create LLM provider from environment variables.

    Returns:
        LLM provider instance, or None if not configured

    Environment variables:
        LLM_PROVIDER: openai, deepseek or anthropic (default: deepseek)
        OPENAI_API_KEY / DEEPSEEK_API_KEY / ANTHROPIC_API_KEY: provider key
        OPENAI_CHAT_MODEL / DEEPSEEK_MODEL / ANTHROPIC_MODEL: model override
    """
    con = console or _console
    llm_provider = os.getenv("LLM_PROVIDER", "deepseek").lower()

    key_var = _API_KEY_VARS.get(llm_provider)
    if key_var is None:
        con.print(f"[red]Error: Unknown LLM provider: {llm_provider}[/red]")
        return None

    api_key = os.getenv(key_var)
    if not api_key:
        con.print(f"[yellow]Warning: {key_var} not set, LLM features disabled[/yellow]")
        return None

    config: dict[str, Any] = {"api_key": api_key}
    model = os.getenv(_MODEL_VARS[llm_provider])
    if model:
        config["model"] = model
    return create_llm_provider(llm_provider, **config)


def get_transport(console: Console | None = None) -> TransportChannel:
    """Create the transport used to stream assistant turns.

    Raises:
        SystemExit: If the provider transport is selected but no LLM is configured

    Environment variables:
        NOTEFUSION_TRANSPORT: provider (stream from LLM_PROVIDER directly) or
            sse (stream from the Note Fusion backend); default: provider
        NOTEFUSION_API_URL / NOTEFUSION_TOKEN: backend settings for sse
    """
    con = console or _console
    kind = os.getenv("NOTEFUSION_TRANSPORT", "provider").lower()

    if kind == "sse":
        return create_transport(
            "sse",
            api_url=os.getenv("NOTEFUSION_API_URL", "http://localhost:8000"),
            token=os.getenv("NOTEFUSION_TOKEN"),
        )

    llm = get_llm(con)
    if llm is None:
        con.print("[red]Error: Please configure and activate an LLM provider first[/red]")
        raise typer.Exit(code=1)
    return create_transport(kind, provider=llm, system_prompt=get_system_prompt())
