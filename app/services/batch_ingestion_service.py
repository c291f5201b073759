"""
app/services/batch_ingestion_service.py

Service layer for CSV contact uploads.

The upload is spooled to the upload directory, streamed row by row through
sanitize -> validate, and every accepted record is written with a single
bulk upsert. Row-level failures are collected and never abort the batch; a
store failure aborts the whole batch and nothing is committed. The spooled
file is always deleted afterwards.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from functools import lru_cache
from typing import BinaryIO, TextIO

from app.config import get_contact_ingestion_settings
from app.domain.contact import (
    BatchIngestionResult,
    BatchRowError,
    ContactRecord,
    RejectedRow,
    Source,
    UnparseableRow,
)
from app.logging_utils import log_event
from app.repositories.contact_repository import ContactStore
from app.validators.contact_validator import validate_record
from app.validators.field_rules import parse_age
from app.validators.sanitizer import sanitize_record
from db.repositories.errors import (
    ContactConflictError,
    ContactRepositoryError,
    FileStorageError,
)
from db.repositories.storage import LocalUploadStorage, UploadStorageBackend
from db.repositories.types import StoredUpload

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("first_name", "last_name", "email")
OPTIONAL_COLUMNS: tuple[str, ...] = ("age",)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BatchHeaderValidationError(ValueError):
    """
    Raised when the upload is not a readable CSV with the expected header.
    """


class BatchPersistenceError(RuntimeError):
    """
    Raised when accepted rows cannot be persisted. Nothing was committed.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ContactBatchIngestionService:
    """
    Coordinates spooling, CSV parsing, sanitizing, validation and persistence.
    """

    def __init__(
        self,
        *,
        storage: UploadStorageBackend,
        log_validation_errors: bool = True,
    ) -> None:
        self._storage = storage
        self._log_validation_errors = log_validation_errors

    def ingest_upload(
        self,
        *,
        stream: BinaryIO,
        store: ContactStore,
        file_name: str | None = None,
    ) -> BatchIngestionResult:
        """
        Spool ``stream`` to disk, ingest it, and delete the spooled copy.
        """

        stored = self._storage.save(stream=stream, file_name=file_name)
        try:
            with stored.path.open("r", encoding="utf-8-sig", newline="") as text_stream:
                result = self.ingest_csv(text_stream=text_stream, store=store)
        finally:
            self._release(stored)

        log_event(
            logger,
            logging.INFO,
            "batch_ingestion_completed",
            file_name=stored.file_name,
            size_bytes=stored.size_bytes,
            checksum=stored.checksum,
            total_rows=result.total_rows,
            valid_records=result.valid_records,
            invalid_records=result.invalid_records,
        )
        return result

    def ingest_csv(self, *, text_stream: TextIO, store: ContactStore) -> BatchIngestionResult:
        """
        Validate every row of an already-open CSV text stream and persist the
        accepted records in one call. Rows are numbered from 1.
        """

        accepted: list[ContactRecord] = []
        errors: list[BatchRowError] = []
        total_rows = 0

        try:
            reader = csv.DictReader(text_stream)
            self._prepare_header(reader)

            for row_number, (raw_row, parse_error) in enumerate(_iter_rows(reader), start=1):
                total_rows = row_number
                if parse_error is not None:
                    self._record_error(errors, UnparseableRow(row=row_number, error=parse_error))
                    continue

                extra_values = raw_row.get(None)
                if extra_values:
                    self._record_error(
                        errors,
                        UnparseableRow(
                            row=row_number,
                            error=(
                                f"Row has {len(reader.fieldnames) + len(extra_values)} values "
                                f"but the header defines {len(reader.fieldnames)} columns."
                            ),
                        ),
                    )
                    continue

                candidate = ContactRecord(
                    first_name=raw_row.get("first_name"),
                    last_name=raw_row.get("last_name"),
                    email=raw_row.get("email"),
                    age=parse_age(raw_row.get("age")),
                )
                sanitized = sanitize_record(candidate)
                validation = validate_record(sanitized, Source.BATCH)
                if validation.valid:
                    accepted.append(sanitized)
                else:
                    self._record_error(
                        errors,
                        RejectedRow(row=row_number, data=candidate, errors=validation.violations),
                    )
        except UnicodeDecodeError as exc:
            raise BatchHeaderValidationError("CSV must be UTF-8 encoded.") from exc

        if accepted:
            self._persist(store=store, accepted=accepted)

        return BatchIngestionResult(total_rows=total_rows, accepted=accepted, errors=errors)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare_header(self, reader: csv.DictReader) -> None:
        try:
            headers = reader.fieldnames
        except csv.Error as exc:
            raise BatchHeaderValidationError(f"Invalid CSV format: {exc}") from exc

        if not headers:
            raise BatchHeaderValidationError("CSV header row is missing.")

        normalized = [header.strip().lower() for header in headers]
        missing = [column for column in REQUIRED_COLUMNS if column not in normalized]
        if missing:
            raise BatchHeaderValidationError(
                f"CSV header is missing required column(s): {', '.join(missing)}."
            )
        reader.fieldnames = normalized

    def _persist(self, *, store: ContactStore, accepted: list[ContactRecord]) -> None:
        try:
            store.bulk_upsert(accepted)
        except ContactConflictError:
            raise
        except ContactRepositoryError as exc:
            log_event(
                logger,
                logging.ERROR,
                "batch_persistence_failed",
                accepted=len(accepted),
                error=str(exc),
            )
            raise BatchPersistenceError("Failed to persist valid CSV rows.") from exc

    def _record_error(self, errors: list[BatchRowError], error: BatchRowError) -> None:
        if self._log_validation_errors:
            if isinstance(error, RejectedRow):
                logger.warning(
                    "CSV validation error row=%s email=%r errors=%s",
                    error.row,
                    error.data.email,
                    "; ".join(error.errors),
                )
            else:
                logger.warning("CSV parse error row=%s error=%s", error.row, error.error)
        errors.append(error)

    def _release(self, stored: StoredUpload) -> None:
        try:
            self._storage.delete(stored)
        except FileStorageError:
            logger.exception("Failed to delete spooled upload path=%s", stored.path)


def _iter_rows(reader: csv.DictReader) -> Iterator[tuple[dict | None, str | None]]:
    """
    Yield ``(row, None)`` per data row, or ``(None, message)`` when the csv
    module rejects a line. Reading resumes on the following line.
    """

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            yield None, f"Malformed CSV row: {exc}"
            continue
        yield row, None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_batch_ingestion_service() -> ContactBatchIngestionService:
    """
    Build and cache the batch service with env-driven settings.
    """

    settings = get_contact_ingestion_settings()
    return ContactBatchIngestionService(
        storage=LocalUploadStorage(settings.upload_dir, max_bytes=settings.max_file_size),
        log_validation_errors=settings.log_validation_errors,
    )
