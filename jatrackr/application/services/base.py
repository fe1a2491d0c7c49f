"""
Helpers shared by the MongoDB-backed services.
"""

from enum import Enum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel


def object_id(value: str) -> Optional[ObjectId]:
    """Parse a document id, returning None for malformed values."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def update_fields(changes: BaseModel) -> Dict[str, Any]:
    """Fields explicitly set on a partial-update model, ready for ``$set``."""
    fields = changes.model_dump(mode="python", exclude_unset=True, exclude_none=True)
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }
