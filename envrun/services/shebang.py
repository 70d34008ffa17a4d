from __future__ import annotations

import os
import sys
from typing import Sequence


def python_shebangs(executable: str | None = None) -> tuple[bytes, ...]:
    """Shebang lines that mean "run me with this interpreter"."""
    interpreter = executable or sys.executable
    return (
        b"#!/usr/bin/env python\n",
        b"#!/usr/bin/env python3\n",
        b"#!" + os.fsencode(interpreter) + b"\n",
    )


class ShebangSniffer:
    """Recognize Python scripts by their first line."""

    def __init__(self, patterns: Sequence[bytes] | None = None) -> None:
        self._patterns = tuple(patterns if patterns is not None else python_shebangs())
        self.probe_length = max(len(pattern) for pattern in self._patterns)

    def matches(self, path: str) -> bool:
        try:
            with open(path, "rb") as handle:
                head = handle.read(self.probe_length)
        except OSError:
            # Unreadable files can still be executable; exec deals with them.
            return False
        return any(head.startswith(pattern) for pattern in self._patterns)
