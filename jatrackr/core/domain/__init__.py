"""
Domain models.
"""

from .models import (
    ApplicationStatus,
    JobData,
    JobDataUpdate,
    User,
    UserUpdate,
    from_document,
    to_document,
)

__all__ = [
    "ApplicationStatus",
    "JobData",
    "JobDataUpdate",
    "User",
    "UserUpdate",
    "from_document",
    "to_document",
]
