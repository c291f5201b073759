"""
app/domain package marker.
"""

from app.domain.contact import (
    BatchIngestionResult,
    BatchRowError,
    ContactRecord,
    RejectedRow,
    Source,
    UnparseableRow,
    ValidationResult,
)

__all__ = [
    "BatchIngestionResult",
    "BatchRowError",
    "ContactRecord",
    "RejectedRow",
    "Source",
    "UnparseableRow",
    "ValidationResult",
]
