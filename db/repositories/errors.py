"""
Repository-layer exceptions for the contact store and upload storage.
"""

from __future__ import annotations


class ContactRepositoryError(Exception):
    """Base exception for contact store failures."""


class ContactConflictError(ContactRepositoryError):
    """Raised when the store rejects a write on the unique email key."""

    def __init__(self, email: str | None = None) -> None:
        message = "Email already exists in database"
        super().__init__(f"{message}: {email}" if email else message)
        self.email = email


class ContactPersistenceError(ContactRepositoryError):
    """Raised on connectivity or transactional failures while writing contacts."""


class FileStorageError(Exception):
    """Raised when spooling or deleting an uploaded file fails."""


class UploadTooLargeError(FileStorageError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"Uploaded file exceeds the {limit_bytes} byte limit.")
        self.limit_bytes = limit_bytes
