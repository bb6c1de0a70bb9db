"""Server settings — loaded from an optional YAML file plus environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from remodern import __version__

LOG_LEVEL_ENV = "REMODERN_LOG_LEVEL"
CONFIG_PATH_ENV = "REMODERN_CONFIG"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class SettingsError(Exception):
    """Raised when a settings file cannot be read or fails validation."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    export_to_console: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Settings for the protocol server and the default tool set."""

    server_name: str = "remodern"
    server_version: str = __version__
    protocol_version: str = "2024-11-05"
    log_level: LogLevel = "WARNING"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    disabled_tools: list[str] = []

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_settings(path: Path | None = None) -> ServerSettings:
    """Build :class:`ServerSettings` from *path* (or ``$REMODERN_CONFIG``) and the environment.

    Environment variables in the file (``${VAR}`` / ``$VAR``) are expanded
    before YAML parsing. ``$REMODERN_LOG_LEVEL`` overrides ``log_level``.

    Raises:
        SettingsError: On unreadable files, YAML errors, or validation failures.
    """
    if path is None and os.environ.get(CONFIG_PATH_ENV):
        path = Path(os.environ[CONFIG_PATH_ENV])

    data: dict[str, Any] = {}
    if path is not None:
        data = _read_yaml(path)

    level = os.environ.get(LOG_LEVEL_ENV)
    if level:
        data["log_level"] = level

    try:
        return ServerSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise SettingsError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("Settings YAML must be a mapping")
    return dict(data)
