"""
Repository layer exports.
"""

from db.repositories.errors import (
    ContactConflictError,
    ContactPersistenceError,
    ContactRepositoryError,
    FileStorageError,
    UploadTooLargeError,
)
from db.repositories.storage import LocalUploadStorage, UploadStorageBackend
from db.repositories.types import StoredUpload

__all__ = [
    "ContactConflictError",
    "ContactPersistenceError",
    "ContactRepositoryError",
    "FileStorageError",
    "LocalUploadStorage",
    "StoredUpload",
    "UploadStorageBackend",
    "UploadTooLargeError",
]
