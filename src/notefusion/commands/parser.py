"""Extraction of directives from a raw assistant response."""

import json
import logging
import re

from ..config import COMMAND_MARKER
from .models import Command

logger = logging.getLogger(__name__)

COMMAND_PATTERN = re.compile(r"COMMAND:([A-Z_]+):\s*(\{.*\})")


def parse_commands(raw: str) -> list[Command]:
    """Parse every well-formed directive line of ``raw``, in order.

    Lines with a marker but no ``NAME: {json}`` shape are skipped silently;
    lines whose JSON does not decode to an object are skipped with a warning.
    """
    if COMMAND_MARKER not in raw:
        return []

    commands = []
    for line in raw.split("\n"):
        trimmed = line.strip()
        match = COMMAND_PATTERN.search(trimmed)
        if not match:
            continue

        name, json_string = match.groups()
        try:
            payload = json.loads(json_string)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in directive %s: %s (line: %r)", name, e, trimmed)
            continue
        if not isinstance(payload, dict):
            logger.warning("Directive %s payload is not an object (line: %r)", name, trimmed)
            continue

        logger.debug("Parsed directive %s with data %s", name, payload)
        commands.append(Command(name=name, payload=payload, line=trimmed))

    return commands
