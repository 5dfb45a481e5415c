"""
app/repositories package marker.
"""

from app.repositories.errors import StorageError, StorageUnavailableError
from app.repositories.user_data_repository import UserDataRepository
from app.repositories.user_data_store import SQLAlchemyUserDataStore, UserDataStore

__all__ = [
    "SQLAlchemyUserDataStore",
    "StorageError",
    "StorageUnavailableError",
    "UserDataRepository",
    "UserDataStore",
]
