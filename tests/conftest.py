"""Shared fixtures for envrun tests."""

import io
import os
import stat
import subprocess
import sys
from pathlib import Path

import pytest
from rich.console import Console

from envrun.core.config import get_runtime_config
from envrun.core.settings_store import Settings
from envrun.core.ui import UIContext, UserInterface

REPO_ROOT = Path(__file__).resolve().parents[1]


class RecordingUI(UserInterface):
    """UserInterface writing to an in-memory buffer."""

    def __init__(self):
        self.buffer = io.StringIO()
        super().__init__(Console(file=self.buffer, width=400, color_system=None))

    @property
    def output(self):
        return self.buffer.getvalue()


@pytest.fixture(autouse=True)
def clear_runtime_config(monkeypatch):
    """Keep ENVRUN_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("ENVRUN_"):
            monkeypatch.delenv(key)
    get_runtime_config.cache_clear()
    yield
    get_runtime_config.cache_clear()


@pytest.fixture
def recording_ui():
    return RecordingUI()


@pytest.fixture
def ui_context(recording_ui):
    return UIContext(recording_ui)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def make_script(tmp_path):
    """Write an executable file and return its path as a string."""

    def _make(name, content, *, executable=True):
        path = tmp_path / name
        path.write_text(content)
        mode = stat.S_IRUSR | stat.S_IWUSR
        if executable:
            mode |= stat.S_IXUSR
        path.chmod(mode)
        return str(path)

    return _make


@pytest.fixture
def run_envrun(tmp_path):
    """Run ``python -m envrun`` in a child interpreter."""

    def _run(*args, env=None, path_dirs=()):
        child_env = {
            key: value for key, value in os.environ.items() if not key.startswith("ENVRUN_")
        }
        child_env["PYTHONPATH"] = os.pathsep.join(
            [str(REPO_ROOT), child_env.get("PYTHONPATH", "")]
        ).rstrip(os.pathsep)
        child_env["ENVRUN_SETTINGS_FILE"] = str(tmp_path / "settings.json")
        child_env["ENVRUN_ENVIRONMENT_PATH"] = str(tmp_path / "no-such-env")
        if path_dirs:
            child_env["PATH"] = os.pathsep.join(
                [*map(str, path_dirs), child_env.get("PATH", "")]
            )
        child_env.update(env or {})
        return subprocess.run(
            [sys.executable, "-m", "envrun", *args],
            capture_output=True,
            text=True,
            env=child_env,
            cwd=tmp_path,
            timeout=60,
        )

    return _run
