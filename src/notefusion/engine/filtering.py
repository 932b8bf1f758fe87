"""Display filtering of the embedded directive protocol."""

from ..config import COMMAND_MARKER


def clean(raw: str, marker: str = COMMAND_MARKER) -> str:
    """Return the display-safe view of a raw response.

    Drops every line that contains ``marker`` and strips surrounding
    whitespace from the result. Pure and idempotent, so it can be re-run on
    the whole buffer after every chunk. A directive whose line has not been
    terminated yet is only dropped once its marker has fully arrived.
    """
    return "\n".join(line for line in raw.split("\n") if marker not in line).strip()
