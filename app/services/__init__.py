"""
app/services package marker.
"""

from app.services.batch_ingestion_service import (
    BatchHeaderValidationError,
    BatchPersistenceError,
    ContactBatchIngestionService,
    get_batch_ingestion_service,
)
from app.services.form_submission_service import (
    FormSubmissionOutcome,
    FormSubmissionService,
    get_form_submission_service,
)

__all__ = [
    "BatchHeaderValidationError",
    "BatchPersistenceError",
    "ContactBatchIngestionService",
    "FormSubmissionOutcome",
    "FormSubmissionService",
    "get_batch_ingestion_service",
    "get_form_submission_service",
]
