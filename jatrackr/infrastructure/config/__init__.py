"""
Configuration infrastructure.

This module provides ``.env`` loading, database settings resolution and
layered application configuration.
"""

from .database import DatabaseSettings, resolve_database_settings
from .env_loader import default_env_path, load_env_file
from .loader import ConfigLoader
from .models import ApplicationConfig, DeploymentMode

__all__ = [
    "DatabaseSettings",
    "resolve_database_settings",
    "default_env_path",
    "load_env_file",
    "ConfigLoader",
    "ApplicationConfig",
    "DeploymentMode",
]
