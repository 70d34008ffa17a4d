from __future__ import annotations

import os
import shutil

from envrun.domain.invocation import ResolvedTarget


def which(command: str, path: str | None = None) -> ResolvedTarget:
    """Look ``command`` up on ``path`` (default ``$PATH``).

    Commands containing a directory component are checked as given.
    """
    found = shutil.which(command, path=path)
    if found is None:
        return ResolvedTarget()
    return ResolvedTarget(path=os.path.abspath(found))
