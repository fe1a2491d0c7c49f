"""
JATrackr - web API for tracking user accounts and job applications.

This package provides the bootstrap sequence (environment loading, settings
resolution, service registration, pipeline assembly) and the HTTP surface of
the JobAppTrackr backend.
"""

__version__ = "0.1.0"

# Public API exports
from .application.container import Container, IContainer, ServiceLifetime
from .infrastructure.config.database import DatabaseSettings, resolve_database_settings
from .infrastructure.config.env_loader import load_env_file
from .infrastructure.config.models import DeploymentMode
from .presentation.api.pipeline import PipelineStage, assemble_pipeline

__all__ = [
    "Container",
    "IContainer",
    "ServiceLifetime",
    "DatabaseSettings",
    "resolve_database_settings",
    "load_env_file",
    "DeploymentMode",
    "PipelineStage",
    "assemble_pipeline",
]
