"""
Job application records backed by the job-data collection.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from ...core.domain.models import JobData, JobDataUpdate, from_document, to_document
from ...core.interfaces.services import IJobDataService
from ...infrastructure.storage.mongo import MongoStore
from .base import object_id, update_fields

logger = logging.getLogger(__name__)


class JobDataService(IJobDataService):
    """CRUD operations on job applications."""

    def __init__(self, store: MongoStore) -> None:
        self._store = store

    async def list_job_data(self) -> List[JobData]:
        return await self._find({})

    async def list_for_user(self, user_id: str) -> List[JobData]:
        return await self._find({"user_id": user_id})

    async def get_job_data(self, job_id: str) -> Optional[JobData]:
        oid = object_id(job_id)
        if oid is None:
            return None
        document = await self._store.job_data().find_one({"_id": oid})
        return from_document(JobData, document) if document is not None else None

    async def create_job_data(self, job: JobData) -> JobData:
        result = await self._store.job_data().insert_one(to_document(job))
        created = job.model_copy(update={"id": str(result.inserted_id)})
        logger.info(f"Created job application {created.id} for user {created.user_id}")
        return created

    async def update_job_data(self, job_id: str, changes: JobDataUpdate) -> Optional[JobData]:
        oid = object_id(job_id)
        if oid is None:
            return None
        updates = update_fields(changes)
        if not updates:
            return await self.get_job_data(job_id)

        document = await self._store.job_data().find_one_and_update(
            {"_id": oid}, {"$set": updates}, return_document=ReturnDocument.AFTER)
        if document is None:
            return None
        return from_document(JobData, document)

    async def remove_job_data(self, job_id: str) -> bool:
        oid = object_id(job_id)
        if oid is None:
            return False
        result = await self._store.job_data().delete_one({"_id": oid})
        return result.deleted_count == 1

    async def _find(self, query: Dict[str, Any]) -> List[JobData]:
        cursor = self._store.job_data().find(query).sort("created_at", -1)
        return [from_document(JobData, doc) async for doc in cursor]
