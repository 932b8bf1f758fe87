"""Prompt text for the provider transport.

The system prompt teaches the model the ``COMMAND:`` directive protocol.
It ships as ``system.txt`` beside this module; a directory named by
``NOTEFUSION_PROMPTS_DIR`` can override any prompt file.
"""

import os
from functools import lru_cache
from pathlib import Path

PROMPTS_ENV_VAR = "NOTEFUSION_PROMPTS_DIR"
NOTE_CONTEXT_HEADER = "Current note content:"

_PACKAGE_DIR = Path(__file__).parent


def _candidates(name: str) -> list[Path]:
    filename = f"{name}.txt"
    override = os.getenv(PROMPTS_ENV_VAR)
    paths = [Path(override) / filename] if override else []
    paths.append(_PACKAGE_DIR / filename)
    return paths


@lru_cache(maxsize=8)
def load_prompt(name: str) -> str:
    """Read prompt ``name``, preferring the override directory.

    Raises:
        FileNotFoundError: If no candidate file exists
    """
    paths = _candidates(name)
    for path in paths:
        if path.is_file():
            return path.read_text(encoding="utf-8").strip()
    searched = "\n".join(f"  - {p}" for p in paths)
    raise FileNotFoundError(f"Prompt '{name}' not found. Searched:\n{searched}")


def get_system_prompt() -> str:
    return load_prompt("system")


def note_context(content: str) -> str:
    """System prompt section carrying the note being edited."""
    return f"{NOTE_CONTEXT_HEADER}\n{content}"


__all__ = [
    "NOTE_CONTEXT_HEADER",
    "get_system_prompt",
    "load_prompt",
    "note_context",
]
