"""
Domain models for user accounts and job-application records.

Records are stored as MongoDB documents; ``id`` holds the string form of the
document's ``_id``.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationStatus(str, Enum):
    """Progress of a single job application."""
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class User(BaseModel):
    """A registered user account."""
    id: Optional[str] = None
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class UserUpdate(BaseModel):
    """Partial update for a user account; unset fields are left unchanged."""
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class JobData(BaseModel):
    """A job application tracked on behalf of a user."""
    id: Optional[str] = None
    user_id: str
    company: str
    position: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    location: Optional[str] = None
    url: Optional[str] = None
    applied_on: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class JobDataUpdate(BaseModel):
    """Partial update for a job application."""
    company: Optional[str] = None
    position: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    location: Optional[str] = None
    url: Optional[str] = None
    applied_on: Optional[datetime] = None
    notes: Optional[str] = None


def to_document(model: BaseModel) -> Dict[str, Any]:
    """Convert a model to a storable document, dropping the ``id`` field."""
    document = model.model_dump(mode="python", exclude={"id"})
    for key, value in document.items():
        if isinstance(value, Enum):
            document[key] = value.value
    return document


def from_document(model_type: Any, document: Dict[str, Any]) -> Any:
    """Build a model from a stored document, mapping ``_id`` to ``id``."""
    data = dict(document)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    return model_type.model_validate(data)
