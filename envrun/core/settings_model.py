from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExecPreferences(BaseModel):
    model_config = ConfigDict(extra="allow")

    disableExecLoad: bool = False
    disableSharedPaths: bool = False


class EnvironmentPreferences(BaseModel):
    model_config = ConfigDict(extra="allow")

    path: str = ".venv"


class SettingsModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    schemaVersion: int = 1
    exec: ExecPreferences = Field(default_factory=ExecPreferences)
    environment: EnvironmentPreferences = Field(default_factory=EnvironmentPreferences)
