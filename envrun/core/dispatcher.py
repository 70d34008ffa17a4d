from __future__ import annotations

from typing import Callable, Protocol, Sequence

from envrun.core.errors import UsageError
from envrun.core.logging import get_logger, log_event
from envrun.core.resolver import which
from envrun.core.settings_store import Settings
from envrun.core.ui import UIContext
from envrun.domain.invocation import (
    ArgItem,
    ExecutionOutcome,
    Failed,
    Invocation,
    ResolvedTarget,
)

logger = get_logger("envrun.dispatch")

Resolver = Callable[[str], ResolvedTarget]


class Sniffer(Protocol):
    def matches(self, path: str) -> bool: ...


class Loader(Protocol):
    def load(self, file: str, args: Sequence[ArgItem], *, command: str) -> ExecutionOutcome: ...


class Replacer(Protocol):
    def replace(
        self,
        command: str,
        args: Sequence[ArgItem],
        *,
        path: str | None = None,
    ) -> ExecutionOutcome: ...


class CommandDispatcher:
    """Pick how a command runs: loaded into this interpreter, or exec'd."""

    def __init__(
        self,
        *,
        ui: UIContext,
        settings: Settings,
        sniffer: Sniffer,
        loader: Loader,
        replacer: Replacer,
        resolver: Resolver = which,
    ) -> None:
        self._ui = ui
        self._settings = settings
        self._sniffer = sniffer
        self._loader = loader
        self._replacer = replacer
        self._resolver = resolver

    def run(self, invocation: Invocation) -> ExecutionOutcome:
        command = invocation.command
        if not command:
            error = UsageError()
            self._ui.error(error.message)
            return Failed(exit_code=error.exit_code, message=error.message)

        args = invocation.exec_args()
        target = self._resolver(command)
        if target.path is None:
            log_event(logger, "dispatch.replace", command=command, path=None)
            return self._replacer.replace(command, args)

        if not self._settings["disable_exec_load"] and self._sniffer.matches(target.path):
            log_event(logger, "dispatch.load", command=command, path=target.path)
            return self._loader.load(target.path, args, command=command)

        log_event(logger, "dispatch.replace", command=command, path=target.path)
        return self._replacer.replace(command, args, path=target.path)
