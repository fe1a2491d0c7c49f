"""
Configuration loading utilities.

This module layers configuration from defaults, ``JATRACKR_*`` environment
variables and the optional ``appsettings.json`` /
``appsettings.{Environment}.json`` files. Later sources win.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .models import DEFAULT_ENVIRONMENT, ApplicationConfig

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "JATRACKR_ENVIRONMENT"
APPSETTINGS_FILE = "appsettings.json"


class ConfigLoader:
    """Configuration loader for appsettings files and environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._env_prefix = "JATRACKR_"
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def resolve_environment_name(self, environment: Optional[str] = None) -> str:
        """Explicit name, then ``JATRACKR_ENVIRONMENT``, then Production."""
        if environment:
            return environment
        return self.environ.get(ENVIRONMENT_VARIABLE) or DEFAULT_ENVIRONMENT

    def load_config(self,
                    environment: Optional[str] = None,
                    config_dir: Optional[Union[str, Path]] = None) -> ApplicationConfig:
        """
        Load configuration from environment variables and appsettings files.

        Args:
            environment: Deployment environment name (optional)
            config_dir: Directory holding appsettings files, defaults to cwd

        Returns:
            Loaded and validated configuration

        Raises:
            ValueError: If a present file or variable holds an invalid value
        """
        environment_name = self.resolve_environment_name(environment)
        directory = Path(config_dir) if config_dir is not None else Path.cwd()

        config_data = self._load_from_environment()
        for file_name in self.settings_files(environment_name):
            file_data = self._load_optional_json(directory / file_name)
            config_data = self._merge_configs(config_data, file_data)

        config_data["environment"] = environment_name
        config_data["config_directory"] = str(directory)

        try:
            config = ApplicationConfig.from_dict(config_data)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        logger.debug(f"Configuration loaded for environment {environment_name}")
        return config

    @staticmethod
    def settings_files(environment_name: str) -> Tuple[str, str]:
        """Names of the appsettings files consulted, in precedence order."""
        return APPSETTINGS_FILE, f"appsettings.{environment_name}.json"

    def _load_optional_json(self, path: Path) -> Dict[str, Any]:
        """Load a JSON file, returning an empty dict if it does not exist."""
        if not path.is_file():
            logger.debug(f"Optional configuration file not found: {path}")
            return {}

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}")
        except OSError as e:
            raise ValueError(f"Error reading {path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root in {path} must be an object")

        logger.info(f"Loaded configuration file {path}")
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration overrides from environment variables."""
        config: Dict[str, Any] = {}

        env_mappings: Dict[str, Tuple[str, Callable[[str], Any]]] = {
            f"{self._env_prefix}DEBUG": ("debug", self._parse_bool),
            f"{self._env_prefix}HOST": ("server.host", str),
            f"{self._env_prefix}PORT": ("server.port", int),
            f"{self._env_prefix}HTTPS_PORT": ("server.https_port", int),
            f"{self._env_prefix}WEB_ROOT": ("server.web_root", str),
            f"{self._env_prefix}LOG_LEVEL": ("logging.level", str),
            f"{self._env_prefix}LOG_DIR": ("logging.log_directory", str),
            f"{self._env_prefix}VALIDATE_STORAGE": ("storage.validate_on_startup", self._parse_bool),
        }

        for env_var, (config_path, converter) in env_mappings.items():
            value = self.environ.get(env_var)
            if value is not None:
                try:
                    self._set_nested_value(config, config_path, converter(value))
                except (ValueError, TypeError) as e:
                    raise ValueError(
                        f"Invalid value for {env_var}: {value} ({e})")

        return config

    def _parse_bool(self, value: str) -> bool:
        """Parse boolean value from string."""
        return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
