"""
Request pipeline assembly.

``assemble_pipeline`` is a pure function from the deployment mode to an
ordered tuple of stage descriptors; ``apply_pipeline`` installs those stages
on a FastAPI application so that the first stage handles a request first.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from fastapi import FastAPI

from ...infrastructure.config.models import ApplicationConfig, DeploymentMode
from .middleware import (
    ApiDocumentationMiddleware,
    HSTSMiddleware,
    HTTPSRedirectionMiddleware,
    StaticFilesMiddleware,
)
from .routing import Controller, map_controller_route, map_fallback_to_file

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_TEMPLATE = "{controller}/{action=Index}/{id?}"


class PipelineStage(Enum):
    """Request handling stages, listed in the order they may appear."""
    HSTS = "hsts"
    API_DOCUMENTATION = "api_documentation"
    HTTPS_REDIRECTION = "https_redirection"
    STATIC_FILES = "static_files"
    ROUTING = "routing"
    CONTROLLER_ROUTE = "controller_route"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class StageDescriptor:
    """A pipeline stage and the options it is installed with."""
    stage: PipelineStage
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, stage: PipelineStage, **options: Any) -> "StageDescriptor":
        return cls(stage, MappingProxyType(dict(options)))


_MIDDLEWARE_STAGES = (
    PipelineStage.HSTS,
    PipelineStage.API_DOCUMENTATION,
    PipelineStage.HTTPS_REDIRECTION,
    PipelineStage.STATIC_FILES,
)


def assemble_pipeline(mode: DeploymentMode,
                      config: Optional[ApplicationConfig] = None) -> Tuple[StageDescriptor, ...]:
    """
    Build the ordered stage list for a deployment mode.

    Production adds HSTS, development adds the API documentation; every
    mode gets HTTPS redirection, static files, routing, the conventional
    controller route and the fallback document.

    Args:
        mode: Deployment mode
        config: Source of stage options, defaults used when omitted
    """
    config = config or ApplicationConfig()
    stages: List[StageDescriptor] = []

    if mode is DeploymentMode.PRODUCTION:
        security = config.security
        stages.append(StageDescriptor.of(
            PipelineStage.HSTS,
            max_age=security.hsts_max_age,
            include_subdomains=security.hsts_include_subdomains,
            preload=security.hsts_preload,
            excluded_hosts=tuple(security.hsts_excluded_hosts)))
    elif mode is DeploymentMode.DEVELOPMENT:
        stages.append(StageDescriptor.of(
            PipelineStage.API_DOCUMENTATION,
            openapi_url=config.docs.openapi_url,
            ui_path=config.docs.ui_path,
            name=config.docs.version))

    stages.extend([
        StageDescriptor.of(PipelineStage.HTTPS_REDIRECTION, https_port=config.server.https_port),
        StageDescriptor.of(PipelineStage.STATIC_FILES, directory=config.server.web_root),
        StageDescriptor.of(PipelineStage.ROUTING),
        StageDescriptor.of(PipelineStage.CONTROLLER_ROUTE, name="default", template=DEFAULT_ROUTE_TEMPLATE),
        StageDescriptor.of(PipelineStage.FALLBACK,
                           directory=config.server.web_root,
                           file=config.server.fallback_file),
    ])
    return tuple(stages)


def apply_pipeline(app: FastAPI,
                   stages: Sequence[StageDescriptor],
                   controllers: Mapping[str, Controller],
                   routers: Sequence[Any] = ()) -> None:
    """
    Install pipeline stages on an application.

    Middleware stages are added innermost first so the first stage in
    ``stages`` wraps all later ones. Route stages are appended to the
    router in order, so earlier routes take precedence.

    Args:
        app: Application to configure
        stages: Output of :func:`assemble_pipeline`
        controllers: Controllers for the conventional route, keyed by name
        routers: API routers included by the routing stage
    """
    middleware = [s for s in stages if s.stage in _MIDDLEWARE_STAGES]
    for descriptor in reversed(middleware):
        _add_middleware(app, descriptor)

    for descriptor in stages:
        stage, options = descriptor.stage, descriptor.options
        if stage is PipelineStage.ROUTING:
            for router in routers:
                app.include_router(router)
        elif stage is PipelineStage.CONTROLLER_ROUTE:
            map_controller_route(app, controllers, options["template"], name=options["name"])
        elif stage is PipelineStage.FALLBACK:
            map_fallback_to_file(app, options["directory"], options["file"])

    logger.info("Request pipeline: " + " -> ".join(s.stage.value for s in stages))


def _add_middleware(app: FastAPI, descriptor: StageDescriptor) -> None:
    options = descriptor.options
    if descriptor.stage is PipelineStage.HSTS:
        app.add_middleware(
            HSTSMiddleware,
            max_age=options["max_age"],
            include_subdomains=options["include_subdomains"],
            preload=options["preload"],
            excluded_hosts=options["excluded_hosts"])
    elif descriptor.stage is PipelineStage.API_DOCUMENTATION:
        app.add_middleware(
            ApiDocumentationMiddleware,
            openapi_url=options["openapi_url"],
            ui_path=options["ui_path"],
            name=options["name"])
    elif descriptor.stage is PipelineStage.HTTPS_REDIRECTION:
        app.add_middleware(HTTPSRedirectionMiddleware, https_port=options["https_port"])
    elif descriptor.stage is PipelineStage.STATIC_FILES:
        app.add_middleware(StaticFilesMiddleware, directory=options["directory"])

