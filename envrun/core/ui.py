from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.text import Text

from envrun.core.errors import Severity

_STYLES: dict[Severity, str] = {
    "error": "bold red",
    "warning": "yellow",
    "information": "",
}


class UserInterface:
    """Prefixed, user-facing messages on stderr."""

    def __init__(self, console: Console | None = None, *, prefix: str = "envrun") -> None:
        self._console = console or Console(stderr=True, highlight=False)
        self._prefix = prefix

    def error(self, message: str) -> None:
        self._emit(message, "error")

    def warn(self, message: str) -> None:
        self._emit(message, "warning")

    def info(self, message: str) -> None:
        self._emit(message, "information")

    def _emit(self, message: str, severity: Severity) -> None:
        text = Text(f"{self._prefix}: " if self._prefix else "", style=_STYLES[severity])
        text.append(message)
        self._console.print(text, soft_wrap=True)


class UIContext:
    """Holds the shared, nullable UI sink passed to the exec strategies.

    While the sink is suppressed, messages are dropped rather than
    interleaved with the output of the program taking over the process.
    """

    def __init__(self, ui: UserInterface | None = None) -> None:
        self.ui = ui

    @contextmanager
    def suppressed(self) -> Iterator[UserInterface | None]:
        saved = self.ui
        self.ui = None
        try:
            yield saved
        finally:
            self.ui = saved

    def error(self, message: str) -> None:
        if self.ui is not None:
            self.ui.error(message)

    def warn(self, message: str) -> None:
        if self.ui is not None:
            self.ui.warn(message)

    def info(self, message: str) -> None:
        if self.ui is not None:
            self.ui.info(message)
