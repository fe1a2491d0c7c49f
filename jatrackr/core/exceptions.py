"""
Application error types shared across layers.
"""

from typing import Iterable


class JATrackrError(Exception):
    """Base class for application errors."""
    pass


class StorageConfigurationError(JATrackrError):
    """Raised when storage is used without the settings it needs."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Storage is not configured, missing environment variables: "
            + ", ".join(self.missing))
