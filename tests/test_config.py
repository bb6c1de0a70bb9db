"""Tests for settings loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from remodern import __version__
from remodern.config import ServerSettings, SettingsError, load_settings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("REMODERN_CONFIG", raising=False)
    monkeypatch.delenv("REMODERN_LOG_LEVEL", raising=False)


class TestServerSettings:
    def test_defaults(self) -> None:
        settings = ServerSettings()
        assert settings.server_name == "remodern"
        assert settings.server_version == __version__
        assert settings.log_level == "WARNING"
        assert settings.telemetry.enabled is False
        assert settings.disabled_tools == []

    def test_level_case_insensitive(self) -> None:
        assert ServerSettings(log_level="debug").log_level == "DEBUG"  # type: ignore[arg-type]


class TestLoadSettings:
    def test_no_file(self) -> None:
        assert load_settings() == ServerSettings()

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "remodern.yaml"
        path.write_text(
            "server_name: custom\n"
            "log_level: info\n"
            "disabled_tools: [migration-tool]\n"
            "telemetry:\n"
            "  enabled: true\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.server_name == "custom"
        assert settings.log_level == "INFO"
        assert settings.disabled_tools == ["migration-tool"]
        assert settings.telemetry.enabled is True

    def test_env_var_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_LABEL", "from-env")
        path = tmp_path / "remodern.yaml"
        path.write_text("server_name: ${SERVER_LABEL}\n", encoding="utf-8")
        assert load_settings(path).server_name == "from-env"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "remodern.yaml"
        path.write_text("server_name: env-path\n", encoding="utf-8")
        monkeypatch.setenv("REMODERN_CONFIG", str(path))
        assert load_settings().server_name == "env-path"

    def test_log_level_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "remodern.yaml"
        path.write_text("log_level: ERROR\n", encoding="utf-8")
        monkeypatch.setenv("REMODERN_LOG_LEVEL", "debug")
        assert load_settings(path).log_level == "DEBUG"

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == ServerSettings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsError, match="Cannot read"):
            load_settings(tmp_path / "ghost.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("server_name: [unclosed\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="YAML parse error"):
            load_settings(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SettingsError, match="mapping"):
            load_settings(path)

    def test_invalid_level(self, tmp_path: Path) -> None:
        path = tmp_path / "level.yaml"
        path.write_text("log_level: LOUD\n", encoding="utf-8")
        with pytest.raises(SettingsError):
            load_settings(path)
