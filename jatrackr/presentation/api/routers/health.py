"""
Health check API endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....infrastructure.config.models import ApplicationConfig
from ....infrastructure.storage.mongo import MongoStore
from ..dependencies import get_config, get_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(config: ApplicationConfig = Depends(get_config)) -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns application identity and the deployment environment.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        }
    }


@router.get("/storage")
async def storage_health(store: MongoStore = Depends(get_store)) -> Dict[str, Any]:
    """
    Storage health.

    Reports whether the database settings are complete and, once a client
    has been opened, whether the server answers a ping.
    """
    return await store.check_health()
