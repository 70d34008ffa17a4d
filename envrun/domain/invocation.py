from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class ExecOptions:
    """Trailing argument marker carrying exec-time options, never a real argument."""

    close_others: bool = True


ArgItem = str | ExecOptions


def split_exec_options(args: Sequence[ArgItem]) -> tuple[list[str], ExecOptions | None]:
    items = list(args)
    options = None
    if items and isinstance(items[-1], ExecOptions):
        options = items.pop()
    return [str(item) for item in items], options


@dataclass(frozen=True)
class Invocation:
    command: str | None
    args: tuple[str, ...] = ()
    close_extra_descriptors: bool = True

    @classmethod
    def from_argv(
        cls,
        argv: Sequence[str],
        *,
        keep_file_descriptors: bool = False,
    ) -> Invocation:
        tokens = list(argv)
        if tokens and tokens[0] == "--":
            tokens = tokens[1:]
        command = tokens[0] if tokens else None
        return cls(
            command=command,
            args=tuple(tokens[1:]),
            close_extra_descriptors=not keep_file_descriptors,
        )

    def exec_args(self) -> list[ArgItem]:
        return [*self.args, ExecOptions(close_others=self.close_extra_descriptors)]


@dataclass(frozen=True)
class ResolvedTarget:
    path: str | None = None


@dataclass(frozen=True)
class Replaced:
    """A stand-in child ran where true image replacement is unavailable."""

    exit_code: int = 0


@dataclass(frozen=True)
class Loaded:
    exit_code: int = 0


@dataclass(frozen=True)
class Failed:
    exit_code: int
    message: str


ExecutionOutcome = Replaced | Loaded | Failed
