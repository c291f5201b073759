"""
app/api/routers/csv_ingestion.py

CSV contact upload endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_contact_store, get_csv_upload
from app.repositories.contact_repository import ContactRepository
from app.schemas.contact import BatchSummaryResponse, BatchUploadResponse
from app.services.batch_ingestion_service import (
    BatchHeaderValidationError,
    BatchPersistenceError,
    ContactBatchIngestionService,
    get_batch_ingestion_service,
)
from db.repositories.errors import ContactConflictError, FileStorageError, UploadTooLargeError

router = APIRouter(prefix="/api", tags=["ingestion"])


@router.post("/upload-csv", response_model=BatchUploadResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    store: ContactRepository = Depends(get_contact_store),
    ingestion_service: ContactBatchIngestionService = Depends(get_batch_ingestion_service),
) -> BatchUploadResponse:
    """
    Ingest one CSV of contacts (`first_name,last_name,email,age`).
    """

    try:
        result = ingestion_service.ingest_upload(
            stream=file.file,
            store=store,
            file_name=file.filename,
        )
    except BatchHeaderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ContactConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="One or more emails already exist in database.",
        ) from exc
    except (BatchPersistenceError, FileStorageError) as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process CSV file.",
        ) from exc
    finally:
        file.file.close()

    return BatchUploadResponse(summary=BatchSummaryResponse.from_result(result))
