"""
Temporary on-disk storage for uploaded CSV files.

Uploads are spooled into the upload directory, read once by the batch
pipeline, and deleted afterwards.
"""

from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Protocol

from db.repositories.errors import FileStorageError, UploadTooLargeError
from db.repositories.types import StoredUpload

_CHUNK_SIZE = 64 * 1024


class UploadStorageBackend(Protocol):
    """
    Storage backend used by the batch ingestion service.
    """

    def save(self, *, stream: BinaryIO, file_name: str | None = None) -> StoredUpload:
        ...

    def delete(self, stored: StoredUpload) -> None:
        ...


def _sanitize_file_name(file_name: str | None) -> str:
    safe_name = Path(file_name or "").name.strip()
    return safe_name or "upload.csv"


class LocalUploadStorage:
    """
    Local filesystem upload spool.
    """

    def __init__(self, root_dir: str | Path = "uploads", *, max_bytes: int | None = None) -> None:
        self._root_dir = Path(root_dir)
        self._max_bytes = max_bytes

    def save(self, *, stream: BinaryIO, file_name: str | None = None) -> StoredUpload:
        safe_file_name = _sanitize_file_name(file_name)
        target = self._root_dir / f"{uuid.uuid4().hex}_{safe_file_name}"
        digest = hashlib.sha256()
        written = 0

        try:
            self._root_dir.mkdir(parents=True, exist_ok=True)
            with target.open("wb") as handle:
                while True:
                    chunk = stream.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if self._max_bytes is not None and written > self._max_bytes:
                        raise UploadTooLargeError(self._max_bytes)
                    digest.update(chunk)
                    handle.write(chunk)
        except UploadTooLargeError:
            self._discard(target)
            raise
        except OSError as exc:
            self._discard(target)
            raise FileStorageError("Failed to write uploaded file to storage.") from exc

        return StoredUpload(
            file_name=safe_file_name,
            path=target,
            size_bytes=written,
            checksum=digest.hexdigest(),
            stored_at=datetime.now(timezone.utc),
        )

    def delete(self, stored: StoredUpload) -> None:
        if not stored.path.exists():
            return
        try:
            stored.path.unlink()
        except OSError as exc:
            raise FileStorageError("Failed to delete uploaded file from storage.") from exc

    @staticmethod
    def _discard(target: Path) -> None:
        try:
            target.unlink(missing_ok=True)
        except OSError:
            pass
