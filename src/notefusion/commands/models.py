from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CommandType(str, Enum):
    """Directives the assistant may embed in a response."""

    CREATE_FOLDER = "CREATE_FOLDER"
    CREATE_NOTE = "CREATE_NOTE"
    UPDATE_NOTE = "UPDATE_NOTE"
    DELETE_NOTE = "DELETE_NOTE"
    UPDATE_FOLDER = "UPDATE_FOLDER"
    DELETE_FOLDER = "DELETE_FOLDER"


class Command(BaseModel):
    """One parsed ``COMMAND:<NAME>: {json}`` line."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Directive name as written, e.g. CREATE_NOTE")
    payload: dict[str, Any] = Field(default_factory=dict)
    line: str = Field(default="", description="Source line, trimmed")

    @property
    def type(self) -> CommandType | None:
        """Known directive type, or None for names this client does not handle."""
        try:
            return CommandType(self.name)
        except ValueError:
            return None


@dataclass(frozen=True)
class CommandContext:
    """What a directive handler may look at besides the directive itself."""

    raw_response: str
    current_content: str = ""
