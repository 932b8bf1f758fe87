"""Engine configuration constants.

Centralizes magic numbers and configuration values for the session engine.
"""

import logging


class LogLevel:
    """Log level names accepted on the command line.

    Maps onto the standard logging hierarchy: DEBUG < INFO < WARNING < ERROR.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns WARNING if invalid."""
        return cls._from_string.get(level_str.lower(), cls.WARNING)


# Render throttling
UPDATE_INTERVAL = 0.050  # Seconds between two visible publishes of a streaming message

# Embedded instruction protocol
COMMAND_MARKER = "COMMAND:"  # Lines containing this token are backend-to-client directives

# Session titles
DEFAULT_CHAT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 30  # Characters kept from the first user message
TITLE_ELLIPSIS = "..."

# User-facing messages
GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."
STREAM_FAILED_TOAST = "Failed to get AI response"
SAVE_FAILED_TOAST = "Failed to save chat"
LOAD_FAILED_TOAST = "Failed to load chat"
LIST_FAILED_TOAST = "Failed to load chat history"
DELETE_FAILED_TOAST = "Failed to delete chat"
DELETE_SUCCESS_TOAST = "Chat deleted successfully"

# Notifications
TOAST_DURATION = 3.0  # Seconds a toast stays visible
