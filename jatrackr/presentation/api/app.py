"""
FastAPI application factory and configuration.

This module creates the FastAPI application, installs the request pipeline
for the configured deployment environment and wires the container into the
application state.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...application.container import Container, IContainer
from ...application.startup import ApplicationStartup, load_settings
from ...core.exceptions import StorageConfigurationError
from ...infrastructure.config.models import ApplicationConfig, DocumentationConfig
from ...infrastructure.logging.setup import setup_logging
from .controllers import build_controllers
from .middleware import ErrorHandlerMiddleware
from .pipeline import apply_pipeline, assemble_pipeline
from .routers import health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Starts the registered components before the first request and stops
    them on shutdown.
    """
    startup: Optional[ApplicationStartup] = getattr(app.state, "startup", None)
    logger.info("Application starting up...")
    if startup is not None:
        await startup.start_application()
    try:
        yield
    finally:
        if startup is not None:
            await startup.stop_application()
        logger.info("Application shut down")


def create_app(container: IContainer,
               config: ApplicationConfig,
               startup: Optional[ApplicationStartup] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Container populated by ApplicationStartup
        config: Application configuration
        startup: Startup manager whose components follow the app lifespan

    Returns:
        Configured FastAPI application
    """
    docs = config.docs
    # Documentation routes are mounted by the pipeline, not by FastAPI itself
    app = FastAPI(
        title=docs.title,
        version=docs.version,
        description=docs.description,
        contact=_contact(docs),
        debug=config.debug,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan
    )

    app.state.container = container
    app.state.config = config
    app.state.startup = startup

    app.add_exception_handler(StorageConfigurationError, _storage_error_handler)

    stages = assemble_pipeline(config.mode, config)
    app.state.pipeline = stages
    apply_pipeline(app, stages, build_controllers(container), routers=[health.router])

    # Outermost, so failures in any stage are reported as JSON
    app.add_middleware(ErrorHandlerMiddleware)

    logger.info(f"FastAPI application created: {config.name} ({config.environment})")
    return app


def create_app_from_environment() -> FastAPI:
    """
    Run the full bootstrap and build the app (for uvicorn reload).
    """
    config, database = load_settings()
    setup_logging(config.logging)

    container = Container()
    startup = ApplicationStartup(container)
    startup.configure_services(config, database)

    return create_app(container, config, startup)


def _contact(docs: DocumentationConfig) -> Optional[Dict[str, Any]]:
    contact = {
        "name": docs.contact_name,
        "email": docs.contact_email,
        "url": docs.contact_url,
    }
    contact = {key: value for key, value in contact.items() if value}
    return contact or None


async def _storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    missing = getattr(exc, "missing", [])
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "Storage not configured", "missing": missing}
    )
