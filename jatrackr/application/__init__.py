"""
Application layer: dependency injection, services and startup logic.
"""

from .container import Container, IContainer, ServiceLifetime
from .startup import ApplicationStartup, load_settings

__all__ = [
    "Container",
    "IContainer",
    "ServiceLifetime",
    "ApplicationStartup",
    "load_settings",
]
