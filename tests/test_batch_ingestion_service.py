"""
tests/test_batch_ingestion_service.py

CSV batch pipeline against a recording fake store and a temp upload directory.

Coverage
--------
- Mixed valid/invalid batch: counts, row order, single bulk call
- All-invalid batch performs no store call
- Parse failures are recorded distinctly and do not abort the batch
- Header and encoding failures
- Store failure aborts the batch; conflicts propagate
- Spooled upload is deleted on success and on every failure path
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from app.domain.contact import ContactRecord, RejectedRow, UnparseableRow
from app.schemas.contact import BatchSummaryResponse
from app.services.batch_ingestion_service import (
    BatchHeaderValidationError,
    BatchPersistenceError,
    ContactBatchIngestionService,
)
from app.validators.contact_validator import AGE_INVALID, EMAIL_INVALID, LAST_NAME_INVALID
from db.repositories.errors import (
    ContactConflictError,
    ContactPersistenceError,
    UploadTooLargeError,
)
from db.repositories.storage import LocalUploadStorage
from tests.conftest import RecordingStore

HEADER = "first_name,last_name,email,age\n"


@pytest.fixture()
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture()
def service(upload_dir: Path) -> ContactBatchIngestionService:
    return ContactBatchIngestionService(storage=LocalUploadStorage(upload_dir))


def _ingest(service: ContactBatchIngestionService, store: RecordingStore, body: str | bytes):
    content = body.encode("utf-8") if isinstance(body, str) else body
    return service.ingest_upload(stream=io.BytesIO(content), store=store, file_name="contacts.csv")


def _spooled_files(upload_dir: Path) -> list[Path]:
    return list(upload_dir.iterdir()) if upload_dir.exists() else []


class TestMixedBatch:
    def test_valid_bad_email_and_bad_age(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
        upload_dir: Path,
    ) -> None:
        body = (
            HEADER
            + "John,Doe,john.doe@mail.ie,30\n"
            + "Jane,Roe,not-an-email,25\n"
            + "Max,Power,max.power@mail.ie,200\n"
        )

        result = _ingest(service, store, body)

        assert result.total_rows == 3
        assert result.valid_records == 1
        assert result.invalid_records == 2
        assert [error.row for error in result.errors] == [2, 3]
        assert all(isinstance(error, RejectedRow) for error in result.errors)
        assert result.errors[0].errors == (EMAIL_INVALID,)
        assert result.errors[1].errors == (AGE_INVALID,)
        assert store.bulk_calls == [
            [ContactRecord(first_name="John", last_name="Doe", email="john.doe@mail.ie", age=30)]
        ]
        assert _spooled_files(upload_dir) == []

    def test_all_invalid_batch_makes_no_store_call(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        body = HEADER + "Bad Name,Doe,a@mail.ie,30\n" + "Ok,Ok,broken,10\n"

        result = _ingest(service, store, body)

        assert result.valid_records == 0
        assert result.invalid_records == 2
        assert store.bulk_calls == []

    def test_rejected_row_keeps_candidate_values(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        result = _ingest(service, store, HEADER + "Ann,Lee,ann@mail.ie,forty\n")

        (error,) = result.errors
        assert isinstance(error, RejectedRow)
        assert error.data.first_name == "Ann"
        assert error.data.has_unparsed_age
        assert error.errors == (AGE_INVALID,)

    def test_blank_age_is_treated_as_absent(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        result = _ingest(service, store, HEADER + "Ann,Lee,ann@mail.ie,\n")

        assert result.valid_records == 1
        assert store.bulk_calls[0][0].age is None

    def test_age_column_is_optional(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        result = _ingest(service, store, "first_name,last_name,email\nAnn,Lee,ann@mail.ie\n")

        assert result.valid_records == 1

    def test_values_are_sanitized_before_validation(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        result = _ingest(service, store, HEADER + "<b>Ann</b>, Lee ,ann@mail.ie,22\n")

        assert result.valid_records == 1
        accepted = store.bulk_calls[0][0]
        assert (accepted.first_name, accepted.last_name) == ("Ann", "Lee")

    def test_header_is_normalized_and_bom_tolerated(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        body = "\ufeff First_Name ,LAST_NAME,Email,Age\nAnn,Lee,ann@mail.ie,22\n"

        result = _ingest(service, store, body)

        assert result.valid_records == 1


class TestParseFailures:
    def test_row_with_extra_values_is_unparseable(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        body = HEADER + "Ann,Lee,ann@mail.ie,22,surplus\n" + "Bob,Ray,bob@mail.ie,40\n"

        result = _ingest(service, store, body)

        assert result.total_rows == 2
        assert result.valid_records == 1
        (error,) = result.errors
        assert isinstance(error, UnparseableRow)
        assert error.row == 1
        assert "5 values" in error.error

    def test_short_row_is_rejected_by_validation(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        result = _ingest(service, store, HEADER + "Ann\n")

        (error,) = result.errors
        assert isinstance(error, RejectedRow)
        assert error.errors == (LAST_NAME_INVALID, EMAIL_INVALID)

    def test_summary_response_preserves_both_error_shapes(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
    ) -> None:
        body = HEADER + "Ann,Lee,ann@mail.ie,1,2\n" + "Bob,Ray,nope,abc\n"

        result = _ingest(service, store, body)
        payload = BatchSummaryResponse.from_result(result).model_dump(by_alias=True)

        assert payload["totalRows"] == 2
        assert payload["validRecords"] == 0
        assert payload["invalidRecords"] == 2
        assert payload["errors"][0] == {"row": 1, "error": payload["errors"][0]["error"]}
        assert payload["errors"][1]["row"] == 2
        assert payload["errors"][1]["data"]["age"] is None
        assert payload["errors"][1]["errors"] == [EMAIL_INVALID, AGE_INVALID]


class TestFailures:
    def test_missing_required_columns(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
        upload_dir: Path,
    ) -> None:
        with pytest.raises(BatchHeaderValidationError, match="email"):
            _ingest(service, store, "first_name,last_name\nAnn,Lee\n")
        assert _spooled_files(upload_dir) == []

    def test_empty_file(self, service: ContactBatchIngestionService, store: RecordingStore) -> None:
        with pytest.raises(BatchHeaderValidationError, match="header"):
            _ingest(service, store, "")

    def test_non_utf8_input(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
        upload_dir: Path,
    ) -> None:
        with pytest.raises(BatchHeaderValidationError, match="UTF-8"):
            _ingest(service, store, HEADER.encode("utf-8") + b"Ann,Lee,\xff\xfe@mail.ie,3\n")
        assert store.bulk_calls == []
        assert _spooled_files(upload_dir) == []

    def test_store_failure_aborts_batch(
        self,
        service: ContactBatchIngestionService,
        store: RecordingStore,
        upload_dir: Path,
    ) -> None:
        store.fail_with = ContactPersistenceError("connection lost")

        with pytest.raises(BatchPersistenceError):
            _ingest(service, store, HEADER + "Ann,Lee,ann@mail.ie,22\n")
        assert _spooled_files(upload_dir) == []

    def test_conflict_propagates(self, service: ContactBatchIngestionService, store: RecordingStore) -> None:
        store.fail_with = ContactConflictError("ann@mail.ie")

        with pytest.raises(ContactConflictError):
            _ingest(service, store, HEADER + "Ann,Lee,ann@mail.ie,22\n")

    def test_oversized_upload_is_refused(self, upload_dir: Path, store: RecordingStore) -> None:
        service = ContactBatchIngestionService(storage=LocalUploadStorage(upload_dir, max_bytes=16))

        with pytest.raises(UploadTooLargeError):
            _ingest(service, store, HEADER + "Ann,Lee,ann@mail.ie,22\n")
        assert store.bulk_calls == []
        assert _spooled_files(upload_dir) == []
