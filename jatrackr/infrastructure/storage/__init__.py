"""
Storage adapters.
"""

from .mongo import MongoStore

__all__ = ["MongoStore"]
