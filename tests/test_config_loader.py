"""
Tests for configuration loader.

This module tests the ConfigLoader class including appsettings layering,
environment variable processing, and configuration merging.
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from jatrackr.infrastructure.config.loader import ConfigLoader
from jatrackr.infrastructure.config.models import ApplicationConfig, DeploymentMode


def write_json(path: Path, data: Dict[str, Any]) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


class TestConfigLoader:
    """Test cases for ConfigLoader class."""

    def test_defaults_without_files_or_variables(self, tmp_path: Path) -> None:
        config = ConfigLoader(environ={}).load_config(config_dir=tmp_path)

        assert isinstance(config, ApplicationConfig)
        assert config.environment == "Production"
        assert config.mode is DeploymentMode.PRODUCTION
        assert config.server.port == 5000
        assert config.config_directory == str(tmp_path)

    def test_environment_name_from_variable(self, tmp_path: Path) -> None:
        loader = ConfigLoader(environ={"JATRACKR_ENVIRONMENT": "Development"})

        config = loader.load_config(config_dir=tmp_path)

        assert config.environment == "Development"
        assert config.mode is DeploymentMode.DEVELOPMENT

    def test_explicit_environment_wins_over_variable(self, tmp_path: Path) -> None:
        loader = ConfigLoader(environ={"JATRACKR_ENVIRONMENT": "Development"})

        config = loader.load_config("Staging", config_dir=tmp_path)

        assert config.environment == "Staging"
        assert config.mode is DeploymentMode.OTHER

    def test_appsettings_files_layer_in_order(self, tmp_path: Path) -> None:
        write_json(tmp_path / "appsettings.json", {
            "name": "Base",
            "server": {"port": 6000, "web_root": "public"},
        })
        write_json(tmp_path / "appsettings.Development.json", {
            "server": {"port": 7000},
        })

        config = ConfigLoader(environ={}).load_config("Development", tmp_path)

        assert config.name == "Base"
        assert config.server.port == 7000
        assert config.server.web_root == "public"

    def test_environment_file_for_other_environment_is_ignored(self, tmp_path: Path) -> None:
        write_json(tmp_path / "appsettings.Development.json", {"server": {"port": 7000}})

        config = ConfigLoader(environ={}).load_config("Production", tmp_path)

        assert config.server.port == 5000

    def test_environment_variables_apply(self, tmp_path: Path) -> None:
        loader = ConfigLoader(environ={
            "JATRACKR_PORT": "8080",
            "JATRACKR_HTTPS_PORT": "8443",
            "JATRACKR_DEBUG": "yes",
            "JATRACKR_LOG_LEVEL": "DEBUG",
            "JATRACKR_VALIDATE_STORAGE": "true",
        })

        config = loader.load_config(config_dir=tmp_path)

        assert config.server.port == 8080
        assert config.server.https_port == 8443
        assert config.debug is True
        assert config.logging.level == "DEBUG"
        assert config.storage.validate_on_startup is True

    def test_appsettings_override_environment_variables(self, tmp_path: Path) -> None:
        write_json(tmp_path / "appsettings.json", {"server": {"port": 6000}})
        loader = ConfigLoader(environ={"JATRACKR_PORT": "8080"})

        config = loader.load_config(config_dir=tmp_path)

        assert config.server.port == 6000

    def test_invalid_environment_value(self, tmp_path: Path) -> None:
        loader = ConfigLoader(environ={"JATRACKR_PORT": "not-a-port"})

        with pytest.raises(ValueError, match="JATRACKR_PORT"):
            loader.load_config(config_dir=tmp_path)

    def test_invalid_json_is_fatal(self, tmp_path: Path) -> None:
        (tmp_path / "appsettings.json").write_text("{ not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            ConfigLoader(environ={}).load_config(config_dir=tmp_path)

    def test_non_object_root_is_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "appsettings.json").write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ValueError, match="must be an object"):
            ConfigLoader(environ={}).load_config(config_dir=tmp_path)

    def test_unknown_section_key_is_rejected(self, tmp_path: Path) -> None:
        write_json(tmp_path / "appsettings.json", {"server": {"unknown": 1}})

        with pytest.raises(ValueError, match="Invalid configuration"):
            ConfigLoader(environ={}).load_config(config_dir=tmp_path)

    def test_unrelated_top_level_keys_are_ignored(self, tmp_path: Path) -> None:
        write_json(tmp_path / "appsettings.json", {"AllowedHosts": "*"})

        config = ConfigLoader(environ={}).load_config(config_dir=tmp_path)

        assert config.name == "JATrackr API"

    def test_settings_files(self) -> None:
        assert ConfigLoader.settings_files("Development") == (
            "appsettings.json", "appsettings.Development.json")

    def test_merge_configs(self) -> None:
        loader = ConfigLoader(environ={})
        merged = loader._merge_configs(
            {"server": {"host": "a", "port": 1}, "debug": False},
            {"server": {"port": 2}, "debug": True})

        assert merged == {"server": {"host": "a", "port": 2}, "debug": True}
