from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Mapping

from pydantic import ValidationError

from envrun.core.config import RuntimeConfig
from envrun.core.settings_model import SettingsModel

# Setting key -> (section, field) in the persisted document.
SETTING_KEYS: dict[str, tuple[str, str]] = {
    "disable_exec_load": ("exec", "disableExecLoad"),
    "disable_shared_paths": ("exec", "disableSharedPaths"),
    "environment_path": ("environment", "path"),
}


class SettingsStore:
    """Load and persist envrun user settings."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        """Read settings from disk, upgrading an existing file in place."""
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text())
            except (OSError, json.JSONDecodeError):
                raw = {}
        else:
            return self._normalize({})
        migrated = self._migrate(raw)
        normalized = self._normalize(migrated)
        if self._should_persist_upgrade(raw, normalized):
            self._backup_raw_settings()
            self.save(normalized)
        return normalized

    def save(self, settings: dict[str, Any]) -> None:
        """Persist settings to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings, indent=4))

    def _normalize(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            model = SettingsModel.model_validate(data or {})
        except ValidationError:
            model = SettingsModel()
        return model.model_dump()

    def _migrate(self, data: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(data, dict):
            return {}
        version = data.get("schemaVersion")
        if not isinstance(version, int):
            version = 0
        if version < 1:
            data = dict(data)
            data["schemaVersion"] = 1
        return data

    def _should_persist_upgrade(
        self, raw: dict[str, Any], normalized: dict[str, Any]
    ) -> bool:
        if not isinstance(raw, dict):
            return True
        if raw.get("schemaVersion") != normalized.get("schemaVersion"):
            return True
        return raw != normalized

    def _backup_raw_settings(self) -> None:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        backup_path = self._path.with_name(f"{self._path.stem}.bak-{timestamp}.json")
        try:
            backup_path.write_text(self._path.read_text())
        except OSError:
            pass


class Settings:
    """Layered view over persisted settings.

    Lookups prefer temporary values, then environment overrides, then the
    persisted document, then the model defaults.
    """

    def __init__(
        self,
        persisted: Mapping[str, Any] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self._persisted = SettingsModel.model_validate(dict(persisted or {})).model_dump()
        self._overrides = {
            key: value for key, value in (overrides or {}).items() if value is not None
        }
        self._check_keys(self._overrides)
        self._temporary: dict[str, Any] = {}

    @classmethod
    def from_sources(cls, persisted: Mapping[str, Any], config: RuntimeConfig) -> Settings:
        overrides = {key: getattr(config, key) for key in SETTING_KEYS}
        return cls(persisted, overrides)

    def __getitem__(self, key: str) -> Any:
        self._check_keys([key])
        if key in self._temporary:
            return self._temporary[key]
        if key in self._overrides:
            return self._overrides[key]
        section, field = SETTING_KEYS[key]
        return self._persisted[section][field]

    def as_dict(self) -> dict[str, Any]:
        return {key: self[key] for key in SETTING_KEYS}

    @contextmanager
    def temporary(self, **values: Any) -> Iterator[Settings]:
        """Override settings until the block exits."""
        self._check_keys(values)
        previous = dict(self._temporary)
        self._temporary.update(values)
        try:
            yield self
        finally:
            self._temporary = previous

    @staticmethod
    def _check_keys(keys: Any) -> None:
        unknown = sorted(set(keys) - set(SETTING_KEYS))
        if unknown:
            raise KeyError(f"Unknown setting: {', '.join(unknown)}")
