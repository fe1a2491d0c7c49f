"""
User account operations backed by the users collection.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from ...core.domain.models import User, UserUpdate, from_document, to_document
from ...core.interfaces.services import IUserService
from ...infrastructure.storage.mongo import MongoStore
from .base import object_id, update_fields

logger = logging.getLogger(__name__)


class UserService(IUserService):
    """CRUD operations on user accounts."""

    def __init__(self, store: MongoStore) -> None:
        self._store = store

    async def list_users(self) -> List[User]:
        return [from_document(User, doc) async for doc in self._store.users().find({})]

    async def get_user(self, user_id: str) -> Optional[User]:
        oid = object_id(user_id)
        if oid is None:
            return None
        return await self._find_one({"_id": oid})

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self._find_one({"username": username})

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._find_one({"email": email})

    async def create_user(self, user: User) -> User:
        result = await self._store.users().insert_one(to_document(user))
        created = user.model_copy(update={"id": str(result.inserted_id)})
        logger.info(f"Created user {created.username} ({created.id})")
        return created

    async def update_user(self, user_id: str, changes: UserUpdate) -> Optional[User]:
        oid = object_id(user_id)
        if oid is None:
            return None
        updates = update_fields(changes)
        if not updates:
            return await self.get_user(user_id)

        document = await self._store.users().find_one_and_update(
            {"_id": oid}, {"$set": updates}, return_document=ReturnDocument.AFTER)
        if document is None:
            return None
        logger.info(f"Updated user {user_id}: {sorted(updates)}")
        return from_document(User, document)

    async def remove_user(self, user_id: str) -> bool:
        oid = object_id(user_id)
        if oid is None:
            return False
        result = await self._store.users().delete_one({"_id": oid})
        removed = result.deleted_count == 1
        if removed:
            logger.info(f"Removed user {user_id}")
        return removed

    async def _find_one(self, query: Dict[str, Any]) -> Optional[User]:
        document = await self._store.users().find_one(query)
        if document is None:
            return None
        return from_document(User, document)
