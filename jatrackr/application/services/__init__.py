"""
Application services registered with the container.
"""

from .job_data_service import JobDataService
from .user_service import UserService

__all__ = [
    "JobDataService",
    "UserService",
]
