from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ENVRUN_", case_sensitive=False)

    log_level: str = "info"
    log_format: str = "json"
    log_dir: Path | None = None
    settings_file: Path | None = None

    # Per-process overrides of persisted settings.
    disable_exec_load: bool | None = None
    disable_shared_paths: bool | None = None
    environment_path: str | None = None


@lru_cache
def get_runtime_config() -> RuntimeConfig:
    return RuntimeConfig()
