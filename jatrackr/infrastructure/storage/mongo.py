"""
MongoDB access shared by the user and job-data services.

The client is created on first use, which is also where missing database
settings are reported.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pymongo import AsyncMongoClient

from ...core.interfaces.lifecycle import IComponent
from ..config.database import DatabaseSettings

logger = logging.getLogger(__name__)


class MongoStore(IComponent):
    """Lazily connected MongoDB database handle."""

    def __init__(self,
                 settings: DatabaseSettings,
                 client_factory: Optional[Callable[[str], Any]] = None) -> None:
        self._settings = settings
        self._client_factory = client_factory or AsyncMongoClient
        self._client: Optional[Any] = None

    @property
    def name(self) -> str:
        return "MongoStore"

    @property
    def settings(self) -> DatabaseSettings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def start(self) -> None:
        missing = self._settings.missing_fields()
        if missing:
            logger.warning(
                f"Database settings incomplete ({', '.join(missing)}); "
                "storage calls will fail until they are provided")

    async def stop(self) -> None:
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        logger.info("MongoDB client closed")

    def database(self) -> Any:
        """
        Get the configured database, creating the client if needed.

        Raises:
            StorageConfigurationError: If any database setting is missing
        """
        settings = self._settings.require()
        if self._client is None:
            logger.info(f"Opening MongoDB client for database {settings.database_name}")
            self._client = self._client_factory(settings.connection_string)
        return self._client[settings.database_name]

    def users(self) -> Any:
        """Collection holding user documents."""
        return self.database()[self._settings.users_collection_name]

    def job_data(self) -> Any:
        """Collection holding job application documents."""
        return self.database()[self._settings.job_data_collection_name]

    async def check_health(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {
            "configured": self._settings.is_complete,
            "missing": self._settings.missing_fields(),
            "connected": self.connected,
        }
        if not self._settings.is_complete:
            return {"healthy": False, "status": "unconfigured", "details": details}
        if self._client is None:
            return {"healthy": True, "status": "idle", "details": details}

        try:
            await self._client.admin.command("ping")
        except Exception as e:
            details["error"] = str(e)
            return {"healthy": False, "status": "unreachable", "details": details}
        return {"healthy": True, "status": "running", "details": details}
