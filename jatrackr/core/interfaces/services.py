"""
Service interfaces for the user and job-data capabilities.

Controllers depend on these interfaces; the container maps each one to
exactly one implementation for the lifetime of the process.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.models import JobData, JobDataUpdate, User, UserUpdate


class IUserService(ABC):
    """User account operations."""

    @abstractmethod
    async def list_users(self) -> List[User]:
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def create_user(self, user: User) -> User:
        pass

    @abstractmethod
    async def update_user(self, user_id: str, changes: UserUpdate) -> Optional[User]:
        """Apply ``changes`` and return the updated user, or None if absent."""
        pass

    @abstractmethod
    async def remove_user(self, user_id: str) -> bool:
        """Delete a user; returns False if no such user exists."""
        pass


class IJobDataService(ABC):
    """Job application record operations."""

    @abstractmethod
    async def list_job_data(self) -> List[JobData]:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[JobData]:
        pass

    @abstractmethod
    async def get_job_data(self, job_id: str) -> Optional[JobData]:
        pass

    @abstractmethod
    async def create_job_data(self, job: JobData) -> JobData:
        pass

    @abstractmethod
    async def update_job_data(self, job_id: str, changes: JobDataUpdate) -> Optional[JobData]:
        pass

    @abstractmethod
    async def remove_job_data(self, job_id: str) -> bool:
        pass
