"""
Main entry point for the JATrackr API.

This module provides the command-line interface and runs the bootstrap
sequence: ``.env`` loading, configuration and database settings
resolution, service registration, pipeline assembly and the HTTP server.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Optional

import typer
import uvicorn

from .application.container import Container
from .application.startup import ApplicationStartup, load_settings
from .infrastructure.config.database import DatabaseSettings
from .infrastructure.config.loader import ENVIRONMENT_VARIABLE
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .presentation.api.app import create_app
from .presentation.api.pipeline import assemble_pipeline

# Create CLI application
cli = typer.Typer(
    name="jatrackr",
    help="JobAppTrackr web API for user accounts and job applications"
)

logger = logging.getLogger(__name__)


@cli.command()
def start(
    environment: Optional[str] = typer.Option(
        None, "--environment", "-e", help="Deployment environment name"
    ),
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", "-c", help="Directory holding appsettings files"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Server host address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Server port"
    ),
    https_port: Optional[int] = typer.Option(
        None, "--https-port", help="Port that plain HTTP requests are redirected to"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Start the JATrackr API server."""

    try:
        config, database = load_settings(environment, config_dir)
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    # Override with command line arguments
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if https_port:
        config.server.https_port = https_port
    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)

    logger.info(f"Starting {config.name} v{config.version}")
    logger.info(f"Environment: {config.environment} ({config.mode.value})")

    try:
        asyncio.run(run_application(config, database))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)


@cli.command()
def dev(
    port: int = typer.Option(
        5000, "--port", "-p", help="Server port"
    ),
    reload: bool = typer.Option(
        True, "--reload/--no-reload", help="Enable auto-reload"
    )
) -> None:
    """Start the server in the Development environment with auto-reload."""

    # Inherited by the reloader's worker process
    os.environ[ENVIRONMENT_VARIABLE] = "Development"

    config, _ = load_settings()
    config.logging.level = "DEBUG"
    setup_logging(config.logging)

    logger.info(f"Starting {config.name} in development mode")

    uvicorn.run(
        "jatrackr.presentation.api.app:create_app_from_environment",
        factory=True,
        host=config.server.host,
        port=port,
        reload=reload,
        reload_dirs=["jatrackr"],
        log_level=config.logging.level.lower(),
        log_config=None
    )


@cli.command()
def show_config(
    environment: Optional[str] = typer.Option(
        None, "--environment", "-e", help="Deployment environment name"
    ),
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", "-c", help="Directory holding appsettings files"
    )
) -> None:
    """Print the resolved configuration with secrets masked."""

    try:
        config, database = load_settings(environment, config_dir)
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    typer.echo(json.dumps({
        "mode": config.mode.value,
        "application": config.to_dict(),
        "database": database.redacted(),
        "missing": database.missing_fields(),
    }, indent=2))


@cli.command()
def show_pipeline(
    environment: Optional[str] = typer.Option(
        None, "--environment", "-e", help="Deployment environment name"
    ),
    config_dir: Optional[str] = typer.Option(
        None, "--config-dir", "-c", help="Directory holding appsettings files"
    )
) -> None:
    """Print the request pipeline stages in order."""

    try:
        config, _ = load_settings(environment, config_dir)
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    typer.echo(f"Environment: {config.environment} ({config.mode.value})")
    for index, descriptor in enumerate(assemble_pipeline(config.mode, config), start=1):
        options = ", ".join(f"{k}={v}" for k, v in descriptor.options.items())
        typer.echo(f"{index}. {descriptor.stage.value}" + (f" ({options})" if options else ""))


async def run_application(config: ApplicationConfig, database: DatabaseSettings) -> None:
    """
    Register services, build the app and serve until shutdown is signaled.

    Args:
        config: Application configuration
        database: Database settings
    """
    container = Container()
    startup = ApplicationStartup(container)
    startup.configure_services(config, database)

    app = create_app(container, config, startup)

    server_config = uvicorn.Config(
        app=app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        access_log=config.debug,
        log_config=None
    )
    server = uvicorn.Server(server_config)

    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown
    await server.serve()


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
