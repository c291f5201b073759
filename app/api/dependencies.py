"""
app/api/dependencies.py

Shared FastAPI dependencies for the contact endpoints.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_contact_ingestion_settings
from app.repositories.contact_repository import ContactRepository
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(csvfile: UploadFile = File(...)) -> UploadFile:
    """
    Accept the `csvfile` multipart field when it is a CSV by extension or MIME type.
    """

    filename = (csvfile.filename or "").strip().lower()
    content_type = (csvfile.content_type or "").strip().lower()

    if not filename.endswith(".csv") and content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return csvfile


def get_contact_store(db: Session = Depends(get_db)) -> ContactRepository:
    settings = get_contact_ingestion_settings()
    return ContactRepository(
        db,
        upsert_on_email=settings.upsert_on_email,
        batch_size=settings.bulk_batch_size,
    )
