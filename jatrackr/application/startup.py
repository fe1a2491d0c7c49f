"""
Application startup and configuration logic.

The bootstrap runs strictly in order: the ``.env`` file is merged into the
environment, application configuration and database settings are resolved
once, and every service is constructed here and registered with the
container before any request is accepted.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Type, Union

from .container import IContainer
from .services.job_data_service import JobDataService
from .services.user_service import UserService
from ..core.interfaces.lifecycle import IStartable, IStoppable
from ..core.interfaces.services import IJobDataService, IUserService
from ..infrastructure.config.database import DatabaseSettings, resolve_database_settings
from ..infrastructure.config.env_loader import default_env_path, load_env_file
from ..infrastructure.config.loader import ConfigLoader
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.storage.mongo import MongoStore

logger = logging.getLogger(__name__)


def load_settings(environment: Optional[str] = None,
                  config_dir: Optional[Union[str, Path]] = None,
                  env_file: Optional[Union[str, Path]] = None) -> Tuple[ApplicationConfig, DatabaseSettings]:
    """
    Run the configuration half of the bootstrap.

    Args:
        environment: Deployment environment name, overrides JATRACKR_ENVIRONMENT
        config_dir: Directory holding appsettings files
        env_file: dotenv file, defaults to ``.env`` in the working directory

    Returns:
        Application configuration and database settings
    """
    load_env_file(env_file if env_file is not None else default_env_path())
    config = ConfigLoader().load_config(environment, config_dir)
    database = resolve_database_settings()
    return config, database


class ApplicationStartup:
    """
    Manages application startup and service configuration.

    This class builds the services, registers them with the DI container,
    and starts and stops the components that own external resources.
    """

    def __init__(self, container: IContainer) -> None:
        self._container = container
        self._started_components: List[IStartable] = []
        self._startup_order: List[Type[object]] = [MongoStore]

    @property
    def container(self) -> IContainer:
        return self._container

    def configure_services(self, config: ApplicationConfig, database: DatabaseSettings) -> None:
        """
        Construct and register all application services.

        Args:
            config: Application configuration
            database: Database settings

        Raises:
            StorageConfigurationError: If eager storage validation is enabled
                and a database setting is missing
        """
        logger.info("Configuring application services...")

        missing = database.missing_fields()
        if missing:
            if config.storage.validate_on_startup:
                database.require()
            logger.warning(f"Missing database environment variables: {', '.join(missing)}")

        store = MongoStore(database)

        self._container.register_instance(ApplicationConfig, config)
        self._container.register_instance(DatabaseSettings, database)
        self._container.register_instance(MongoStore, store)
        self._container.register(IUserService, lambda: UserService(store))  # type: ignore[type-abstract]
        self._container.register(IJobDataService, lambda: JobDataService(store))  # type: ignore[type-abstract]

        logger.info("Service configuration completed")

    async def start_application(self) -> None:
        """Start registered components in startup order."""
        logger.info("Starting application components...")

        for component_type in self._startup_order:
            component = self._container.try_resolve(component_type)
            if not isinstance(component, IStartable):
                continue
            try:
                await component.start()
            except Exception as e:
                logger.error(f"Failed to start component {component_type.__name__}: {e}")
                await self.stop_application()
                raise
            self._started_components.append(component)
            logger.debug(f"Started component: {component_type.__name__}")

        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop started components in reverse order."""
        for component in reversed(self._started_components):
            try:
                if isinstance(component, IStoppable):
                    await component.stop()
            except Exception as e:
                logger.error(f"Error stopping component {type(component).__name__}: {e}")

        self._started_components.clear()
        logger.info("Application shutdown completed")
