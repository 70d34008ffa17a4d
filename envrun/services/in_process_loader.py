from __future__ import annotations

import os
import signal
import sys
from runpy import run_path
from typing import Callable, Iterable, Sequence

from setproctitle import setproctitle

from envrun.core.errors import INTENTIONAL_TERMINATION, LoadFailure
from envrun.core.logging import get_logger, log_event
from envrun.core.settings_store import Settings
from envrun.core.ui import UIContext
from envrun.domain.invocation import ArgItem, Loaded, split_exec_options

logger = get_logger("envrun.load")

# Resetting these would hide hardware faults, or is refused by the OS.
RESERVED_SIGNALS = ("SIGSEGV", "SIGBUS", "SIGILL", "SIGFPE", "SIGVTALRM", "SIGKILL", "SIGSTOP")


def reset_signal_handlers(reserved: Iterable[str] = RESERVED_SIGNALS) -> list[int]:
    """Restore the default disposition of every signal outside ``reserved``.

    Returns the signal numbers that were reset.
    """
    skipped = {getattr(signal, name) for name in reserved if hasattr(signal, name)}
    reset: list[int] = []
    for signum in sorted(signal.valid_signals()):
        if signum in skipped:
            continue
        try:
            signal.signal(signum, signal.SIG_DFL)
        except (OSError, ValueError):
            # Signals owned by the C runtime cannot be changed.
            continue
        reset.append(int(signum))
    return reset


def process_title(file: str, args: Sequence[str]) -> str:
    return f"{file} {' '.join(args)}".strip()


class InProcessLoader:
    """Run a Python script inside this interpreter instead of exec'ing it."""

    def __init__(
        self,
        ui: UIContext,
        settings: Settings,
        configure_environment: Callable[[], None],
    ) -> None:
        self._ui = ui
        self._settings = settings
        self._configure_environment = configure_environment

    def load(self, file: str, args: Sequence[ArgItem], *, command: str) -> Loaded:
        """Execute ``file`` as ``__main__``.

        ``SystemExit`` and ``KeyboardInterrupt`` from the script propagate
        unchanged. Any other error is reported and turned into an abort.
        """
        argv, _options = split_exec_options(args)
        sys.argv[:] = [file, *argv]
        setproctitle(process_title(file, argv))

        log_event(logger, "load.start", command=command, file=file)
        try:
            with self._ui.suppressed(), self._settings.temporary(disable_shared_paths=False):
                self._configure_environment()
                reset_signal_handlers()
                sys.path.insert(0, os.path.dirname(os.path.abspath(file)))
                run_path(file, run_name="__main__")
        except INTENTIONAL_TERMINATION:
            raise
        except Exception as exc:
            failure = LoadFailure(command, file, exc, internal_files=frozenset({__file__}))
            log_event(logger, "load.failed", command=command, file=file, error=repr(exc))
            self._ui.error(failure.message)
            raise SystemExit(failure.detail) from None
        return Loaded()
