"""
FastAPI dependencies reading the bootstrap results from application state.

Routers never build services themselves; they receive what
``ApplicationStartup.configure_services`` registered in the container.
"""

import logging
from typing import Any, Callable, Type, TypeVar

from fastapi import Depends, HTTPException, Request, status

from ...application.container import (
    CircularDependencyException,
    IContainer,
    ServiceNotRegisteredException,
    ServiceResolutionException,
)
from ...infrastructure.config.models import ApplicationConfig
from ...infrastructure.storage.mongo import MongoStore

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _state(request: Request, attribute: str) -> Any:
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Application {attribute} not initialised"
        )
    return value


def get_container(request: Request) -> IContainer:
    """Container populated during startup (503 before that)."""
    return _state(request, "container")  # type: ignore[no-any-return]


def get_config(request: Request) -> ApplicationConfig:
    """Resolved application configuration (503 before startup)."""
    return _state(request, "config")  # type: ignore[no-any-return]


def resolved(service_type: Type[T]) -> Callable[[IContainer], T]:
    """
    Build a dependency that resolves ``service_type`` from the container.

    A registration that is missing or cannot be built is reported as 503.
    """
    def dependency(container: IContainer = Depends(get_container)) -> T:
        try:
            return container.resolve(service_type)
        except (ServiceNotRegisteredException, ServiceResolutionException,
                CircularDependencyException) as e:
            logger.warning(f"Dependency {service_type.__name__} unavailable: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"{service_type.__name__} is not available"
            )

    return dependency


get_store = resolved(MongoStore)
