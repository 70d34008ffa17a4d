from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_path

from envrun.core.config import RuntimeConfig

APP_NAME = "envrun"
APP_AUTHOR = "envrun"
SETTINGS_FILENAME = "settings.json"


def settings_path(config: RuntimeConfig) -> Path:
    if config.settings_file is not None:
        return config.settings_file.expanduser()
    return Path(user_config_path(APP_NAME, APP_AUTHOR)) / SETTINGS_FILENAME
