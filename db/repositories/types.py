"""
Typed DTOs used by the upload storage flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class StoredUpload:
    """
    Metadata produced by the storage backend after spooling an upload to disk.
    """

    file_name: str
    path: Path
    size_bytes: int
    checksum: str
    stored_at: datetime
