from __future__ import annotations

import errno
import itertools
import os
import runpy
import traceback
from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "information"]

EXIT_CODES: dict[str, int] = {
    "not_executable": 126,
    "command_not_found": 127,
    "missing_command": 128,
    "load_failed": 1,
}
DEFAULT_EXIT_CODE = 1

NOT_FOUND_HINT = "Install missing executables into the environment first"

# Raised by a loaded script on purpose; always propagated untouched.
INTENTIONAL_TERMINATION = (SystemExit, KeyboardInterrupt)


def exit_code_for(code: str) -> int:
    return EXIT_CODES.get(code, DEFAULT_EXIT_CODE)


@dataclass
class EnvrunError(Exception):
    code: str
    message: str
    detail: str | None = None
    hint: str | None = None
    severity: Severity = "error"

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.code)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class UsageError(EnvrunError):
    def __init__(self) -> None:
        super().__init__(code="missing_command", message="exec needs a command to run")


class ExecFailure(EnvrunError):
    """An exec attempt failed in one of the expected ways."""


class NotExecutableError(ExecFailure):
    def __init__(self, command: str, detail: str | None = None) -> None:
        super().__init__(
            code="not_executable",
            message=f"not executable: {command}",
            detail=detail,
        )


class NotFoundError(ExecFailure):
    def __init__(self, command: str, detail: str | None = None) -> None:
        super().__init__(
            code="command_not_found",
            message=f"command not found: {command}",
            detail=detail,
            hint=NOT_FOUND_HINT,
        )


class LoadFailure(EnvrunError):
    """Uncaught error raised by code loaded into this process."""

    def __init__(
        self,
        command: str,
        file: str,
        error: BaseException,
        *,
        internal_files: frozenset[str] = frozenset(),
    ) -> None:
        super().__init__(
            code="load_failed",
            message=f"failed to load command: {command} ({file})",
            detail=format_backtrace(error, internal_files=internal_files),
        )
        self.error = error

    def __str__(self) -> str:
        return self.message


_RUNPY_FILES = frozenset(
    name for name in (getattr(runpy, "__file__", None), "<frozen runpy>") if name
)


def format_backtrace(
    error: BaseException,
    *,
    internal_files: frozenset[str] = frozenset(),
) -> str:
    """Render ``error`` with its traceback, minus the frames that loaded it.

    Leading frames from ``internal_files`` and from :mod:`runpy` are the
    loading machinery, not the failing program, and are dropped.
    """
    skipped = {os.path.normcase(name) for name in internal_files | _RUNPY_FILES}
    frames = itertools.dropwhile(
        lambda frame: os.path.normcase(frame.filename) in skipped,
        traceback.extract_tb(error.__traceback__),
    )
    lines = [f"{error.__class__.__name__}: {error}"]
    lines.extend(
        f"  {frame.filename}:{frame.lineno}:in {frame.name}" for frame in frames
    )
    return "\n".join(lines)


def translate_exec_error(error: OSError, command: str) -> EnvrunError:
    """Map an OS-level exec failure to the error reported to the user."""
    detail = error.strerror or None
    if isinstance(error, PermissionError) or error.errno == errno.ENOEXEC:
        return NotExecutableError(command, detail)
    if isinstance(error, FileNotFoundError):
        return NotFoundError(command, detail)
    return wrap_error(error, code="exec_failed", message=f"failed to execute: {command}")


def format_error(error: BaseException) -> tuple[str, Severity]:
    if isinstance(error, EnvrunError):
        return error.message, error.severity
    return f"{error}", "error"


def wrap_error(
    error: BaseException,
    *,
    code: str,
    message: str,
    severity: Severity = "error",
) -> EnvrunError:
    if isinstance(error, EnvrunError):
        return error
    detail = str(error)
    return EnvrunError(code=code, message=message, detail=detail, severity=severity)
