"""Transient user notifications (toasts).

Hides how the hosting UI shows short-lived status messages. The engine only
calls ``success``/``error``/``info``; the notifier decides how they appear.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from rich.markup import escape

from .config import TOAST_DURATION

if TYPE_CHECKING:
    from rich.console import Console


class ToastLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Toast:
    """A notification shown for ``duration`` seconds."""

    message: str
    level: ToastLevel = ToastLevel.SUCCESS
    duration: float = TOAST_DURATION
    created_at: float = field(default_factory=time.monotonic)

    def expired(self, now: float) -> bool:
        return now - self.created_at >= self.duration


class Notifier(ABC):
    """Shows transient messages. Subclasses implement ``notify``."""

    @abstractmethod
    def notify(self, message: str, level: ToastLevel = ToastLevel.SUCCESS) -> None:
        """Show ``message`` at ``level``."""

    def success(self, message: str) -> None:
        self.notify(message, ToastLevel.SUCCESS)

    def error(self, message: str) -> None:
        self.notify(message, ToastLevel.ERROR)

    def info(self, message: str) -> None:
        self.notify(message, ToastLevel.INFO)


class ToastQueue(Notifier):
    """Keeps toasts in memory until they expire or are dismissed."""

    def __init__(
        self,
        duration: float = TOAST_DURATION,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._duration = duration
        self._clock = clock
        self._toasts: list[Toast] = []

    def notify(self, message: str, level: ToastLevel = ToastLevel.SUCCESS) -> None:
        self._toasts.append(Toast(message, level, self._duration, self._clock()))

    def active(self) -> list[Toast]:
        """Toasts still visible; expired ones are dropped."""
        now = self._clock()
        self._toasts = [t for t in self._toasts if not t.expired(now)]
        return list(self._toasts)

    def dismiss(self, toast: Toast) -> None:
        if toast in self._toasts:
            self._toasts.remove(toast)

    @property
    def history(self) -> list[Toast]:
        """All toasts not yet dismissed or pruned, expired included."""
        return list(self._toasts)


class ConsoleNotifier(Notifier):
    """Prints toasts to a Rich console."""

    _styles = {
        ToastLevel.SUCCESS: "[green]+[/green]",
        ToastLevel.ERROR: "[red]x[/red]",
        ToastLevel.INFO: "[cyan]i[/cyan]",
    }

    def __init__(self, console: "Console") -> None:
        self._console = console

    def notify(self, message: str, level: ToastLevel = ToastLevel.SUCCESS) -> None:
        self._console.print(f"{self._styles[level]} {escape(message)}")
