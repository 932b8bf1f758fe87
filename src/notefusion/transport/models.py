from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..llm.models import ChatMessage


class StreamRequest(BaseModel):
    """Everything a transport needs to open one assistant turn."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(description="The new user message")
    history: list[ChatMessage] = Field(
        default_factory=list,
        description="Prior turns followed by the new user message"
    )
    current_content: str = Field(default="", description="Document the user is working on")
    edit_mode: bool = Field(default=False, description="Whether the turn edits a selection")

    def to_payload(self) -> dict[str, Any]:
        """JSON body understood by the Note Fusion chat backend."""
        return {
            "message": self.message,
            "current_content": self.current_content,
            "edit_mode": self.edit_mode,
            "messages": [{"role": m.role, "content": m.content} for m in self.history],
        }
