"""
Repository-layer exceptions for user_data persistence.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for user_data storage failures."""


class StorageUnavailableError(StorageError):
    """Raised when the database cannot be reached or the connection dropped."""
