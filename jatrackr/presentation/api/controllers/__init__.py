"""
Convention-routed controllers.
"""

from typing import Dict

from ....application.container import IContainer
from ..routing import Controller
from .jobdata import JobDataController
from .users import UsersController

__all__ = [
    "JobDataController",
    "UsersController",
    "build_controllers",
]


def build_controllers(container: IContainer) -> Dict[str, Controller]:
    """Controllers keyed by the name used in the ``{controller}`` segment."""
    controllers = [UsersController(container), JobDataController(container)]
    return {controller.name: controller for controller in controllers}
