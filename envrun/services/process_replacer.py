"""Replace the current process with the target command.

POSIX ``exec`` swaps the process image and never returns. Other platforms
have no true equivalent (``os.execv`` on Windows starts a new process and
exits the caller without waiting), so there the command runs as a child
and its exit status is reported as ours.
"""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Sequence

from envrun.core.errors import ExecFailure, translate_exec_error
from envrun.core.logging import get_logger, log_event
from envrun.core.ui import UIContext
from envrun.domain.invocation import (
    ArgItem,
    ExecOptions,
    ExecutionOutcome,
    Failed,
    Replaced,
    split_exec_options,
)

logger = get_logger("envrun.replace")

SUPPORTS_EXEC = os.name == "posix"


def inherit_open_descriptors() -> None:
    """Let every open descriptor above stderr survive the exec."""
    try:
        descriptors = [int(name) for name in os.listdir("/dev/fd")]
    except OSError:
        return
    for fd in descriptors:
        if fd <= 2:
            continue
        try:
            os.set_inheritable(fd, True)
        except OSError:
            # The descriptor used to list /dev/fd is already closed.
            continue


class ProcessReplacer:
    def __init__(self, ui: UIContext) -> None:
        self._ui = ui

    def replace(
        self,
        command: str,
        args: Sequence[ArgItem],
        *,
        path: str | None = None,
    ) -> ExecutionOutcome:
        """Run ``command`` in place of this process.

        With ``path`` the resolved file is executed and ``command`` is kept as
        ``argv[0]``; without it the OS searches ``PATH`` for ``command``.
        Only returns when the replacement failed, or when running as a child.
        """
        argv, options = split_exec_options(args)
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            with self._ui.suppressed():
                return self._replace_image(command, argv, path, options)
        except OSError as exc:
            error = translate_exec_error(exc, command)
            log_event(logger, "replace.failed", command=command, path=path, code=error.code)
            if not isinstance(error, ExecFailure):
                raise error from exc

        self._ui.error(error.message)
        if error.hint:
            self._ui.warn(error.hint)
        return Failed(exit_code=error.exit_code, message=error.message)

    def _replace_image(
        self,
        command: str,
        argv: list[str],
        path: str | None,
        options: ExecOptions | None,
    ) -> ExecutionOutcome:
        full_argv = [command, *argv]
        if not SUPPORTS_EXEC:
            completed = subprocess.run(full_argv, executable=path)
            return Replaced(exit_code=completed.returncode)

        if options is not None and not options.close_others:
            inherit_open_descriptors()
        if path is not None:
            os.execv(path, full_argv)
        else:
            os.execvp(command, full_argv)
        raise AssertionError("exec returned")  # pragma: no cover
