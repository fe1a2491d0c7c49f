"""
Core interfaces implemented by infrastructure and application services.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .services import IUserService, IJobDataService

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IUserService",
    "IJobDataService",
]
