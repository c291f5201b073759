"""
app/schemas package marker.
"""

from app.schemas.contact import (
    BatchRowData,
    BatchSummaryResponse,
    BatchUploadResponse,
    ContactResponse,
    FormSubmissionRequest,
    FormSubmissionResponse,
    HealthResponse,
    RejectedRowResponse,
    UnparseableRowResponse,
)

__all__ = [
    "BatchRowData",
    "BatchSummaryResponse",
    "BatchUploadResponse",
    "ContactResponse",
    "FormSubmissionRequest",
    "FormSubmissionResponse",
    "HealthResponse",
    "RejectedRowResponse",
    "UnparseableRowResponse",
]
