"""
Database settings resolved from environment variables.

Resolution never fails: absent variables become ``None`` and are only
reported when storage is actually used (or at startup when eager
validation is enabled).
"""

import os
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Optional

from ...core.exceptions import StorageConfigurationError

MONGODB_CS = "MONGODB_CS"
MONGODB_DB_NAME = "MONGODB_DB_NAME"
MONGODB_USER_COLLECTION = "MONGODB_USER_COLLECTION"
MONGODB_JOBDATA_COLLECTION = "MONGODB_JOBDATA_COLLECTION"

# field name -> environment variable
ENV_MAPPING: Dict[str, str] = {
    "connection_string": MONGODB_CS,
    "database_name": MONGODB_DB_NAME,
    "users_collection_name": MONGODB_USER_COLLECTION,
    "job_data_collection_name": MONGODB_JOBDATA_COLLECTION,
}


@dataclass(frozen=True)
class DatabaseSettings:
    """MongoDB connection settings, immutable once built."""
    connection_string: Optional[str] = None
    database_name: Optional[str] = None
    users_collection_name: Optional[str] = None
    job_data_collection_name: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Environment variable names whose values are not set."""
        return [
            ENV_MAPPING[f.name] for f in fields(self)
            if not getattr(self, f.name)
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()

    def require(self) -> "DatabaseSettings":
        """
        Return self if every value is set.

        Raises:
            StorageConfigurationError: If any value is missing
        """
        missing = self.missing_fields()
        if missing:
            raise StorageConfigurationError(missing)
        return self

    def redacted(self) -> Dict[str, Optional[str]]:
        """Settings as a dict with the connection string masked."""
        return {
            "connection_string": "***" if self.connection_string else None,
            "database_name": self.database_name,
            "users_collection_name": self.users_collection_name,
            "job_data_collection_name": self.job_data_collection_name,
        }


def resolve_database_settings(environ: Optional[Mapping[str, str]] = None) -> DatabaseSettings:
    """
    Build DatabaseSettings from the four ``MONGODB_*`` variables.

    Args:
        environ: Mapping to read, defaults to ``os.environ``
    """
    source = os.environ if environ is None else environ
    values = {
        field_name: source.get(env_var) or None
        for field_name, env_var in ENV_MAPPING.items()
    }
    return DatabaseSettings(**values)
