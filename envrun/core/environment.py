from __future__ import annotations

import os
import site
import sys
from pathlib import Path
from typing import MutableMapping

from envrun.core.logging import get_logger, log_event
from envrun.core.settings_store import Settings

logger = get_logger("envrun.environment")


def shared_site_paths() -> list[str]:
    """Site directories the interpreter shares with every environment."""
    paths = list(site.getsitepackages())
    if site.ENABLE_USER_SITE:
        paths.append(site.getusersitepackages())
    return paths


class EnvironmentSetup:
    """Expose the configured environment to child processes and loaded code."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @property
    def root(self) -> Path:
        return Path(self._settings["environment_path"]).expanduser().absolute()

    @property
    def scripts_dir(self) -> Path:
        return self.root / ("Scripts" if os.name == "nt" else "bin")

    def site_packages(self) -> list[Path]:
        if os.name == "nt":
            candidates = [self.root / "Lib" / "site-packages"]
        else:
            version = f"python{sys.version_info.major}.{sys.version_info.minor}"
            candidates = [self.root / "lib" / version / "site-packages"]
        return [candidate for candidate in candidates if candidate.is_dir()]

    def export(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Point child processes at the environment, as ``activate`` would."""
        environ = os.environ if environ is None else environ
        if self._settings["disable_shared_paths"]:
            # Children skip user site-packages and inherit the setting.
            environ["PYTHONNOUSERSITE"] = "1"
            environ["ENVRUN_DISABLE_SHARED_PATHS"] = "1"
        if not self.root.is_dir():
            log_event(logger, "environment.missing", path=str(self.root))
            return
        environ["VIRTUAL_ENV"] = str(self.root)
        environ.pop("PYTHONHOME", None)
        scripts = str(self.scripts_dir)
        entries = [entry for entry in environ.get("PATH", "").split(os.pathsep) if entry]
        if not entries or entries[0] != scripts:
            environ["PATH"] = os.pathsep.join([scripts, *entries])

    def activate(self) -> None:
        """Make the environment's packages importable in this process."""
        if self._settings["disable_shared_paths"]:
            shared = set(shared_site_paths())
            sys.path[:] = [entry for entry in sys.path if entry not in shared]

        original = list(sys.path)
        for directory in self.site_packages():
            site.addsitedir(str(directory))
        added = [entry for entry in sys.path if entry not in original]
        sys.path[:] = added + original
        log_event(logger, "environment.activated", added=added)
