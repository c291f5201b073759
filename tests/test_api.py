"""
tests/test_api.py

HTTP contract of the contact endpoints, served by TestClient over
in-memory SQLite.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.api.dependencies import get_contact_store
from app.main import create_app
from app.repositories.contact_repository import ContactRepository
from app.services.batch_ingestion_service import (
    ContactBatchIngestionService,
    get_batch_ingestion_service,
)
from app.validators.contact_validator import EIRCODE_REQUIRED, EMAIL_INVALID
from db.repositories.storage import LocalUploadStorage
from db.session import Database, get_db

FORM = {
    "firstName": "Aoife",
    "lastName": "Byrne",
    "email": "aoife.byrne@mail.ie",
    "phoneNumber": "087-123-4567",
    "eircode": "1A2B3C",
}


@pytest.fixture()
def app(engine: Engine, tmp_path: Path) -> FastAPI:
    application = create_app(Database(engine=engine))
    application.dependency_overrides[get_batch_ingestion_service] = lambda: (
        ContactBatchIngestionService(storage=LocalUploadStorage(tmp_path / "uploads"))
    )
    return application


@pytest.fixture()
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


def _stored_count(engine: Engine) -> int:
    with Session(engine) as session:
        return ContactRepository(session).count()


class TestHealth:
    def test_reports_running_and_connected(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Server is running"
        assert body["database"] == "Connected"
        assert body["uptime_seconds"] >= 0


class TestSubmitForm:
    def test_valid_submission(self, client: TestClient, engine: Engine) -> None:
        response = client.post("/api/submit-form", json=FORM)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Form data saved successfully"
        assert body["data"]["phone_number"] == "0871234567"
        assert _stored_count(engine) == 1

    def test_resubmission_updates_existing_contact(self, client: TestClient, engine: Engine) -> None:
        client.post("/api/submit-form", json=FORM)
        response = client.post("/api/submit-form", json={**FORM, "firstName": "Niamh"})

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Niamh"
        assert _stored_count(engine) == 1

    def test_empty_snake_case_key_falls_back_to_camel_case(self, client: TestClient) -> None:
        response = client.post("/api/submit-form", json={**FORM, "first_name": ""})

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Aoife"

    def test_numeric_phone_is_accepted(self, client: TestClient) -> None:
        response = client.post("/api/submit-form", json={**FORM, "phoneNumber": 8712345678})

        assert response.status_code == 200
        assert response.json()["data"]["phone_number"] == "8712345678"

    def test_validation_failure_lists_violations(self, client: TestClient, engine: Engine) -> None:
        response = client.post(
            "/api/submit-form",
            json={**FORM, "email": "not-an-email", "eircode": ""},
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Validation failed"
        assert detail["errors"] == [EMAIL_INVALID, EIRCODE_REQUIRED]
        assert _stored_count(engine) == 0

    def test_duplicate_email_conflicts_when_upsert_disabled(
        self,
        app: FastAPI,
        client: TestClient,
    ) -> None:
        def _strict_store(db: Session = Depends(get_db)) -> ContactRepository:
            return ContactRepository(db, upsert_on_email=False)

        app.dependency_overrides[get_contact_store] = _strict_store

        assert client.post("/api/submit-form", json=FORM).status_code == 200
        response = client.post("/api/submit-form", json=FORM)

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already exists in database"


class TestUploadCsv:
    def test_mixed_upload_returns_camel_case_summary(
        self,
        client: TestClient,
        engine: Engine,
        tmp_path: Path,
    ) -> None:
        content = (
            "first_name,last_name,email,age\n"
            "John,Doe,john.doe@mail.ie,30\n"
            "Jane,Roe,not-an-email,25\n"
            "Max,Power,max.power@mail.ie,200\n"
        )

        response = client.post(
            "/api/upload-csv",
            files={"csvfile": ("contacts.csv", content, "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "CSV processing completed"
        summary = body["summary"]
        assert summary["totalRows"] == 3
        assert summary["validRecords"] == 1
        assert summary["invalidRecords"] == 2
        assert [error["row"] for error in summary["errors"]] == [2, 3]
        assert summary["errors"][0]["data"]["email"] == "not-an-email"
        assert _stored_count(engine) == 1
        assert list((tmp_path / "uploads").iterdir()) == []

    def test_non_csv_file_is_refused(self, client: TestClient) -> None:
        response = client.post(
            "/api/upload-csv",
            files={"csvfile": ("contacts.txt", "hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only CSV files are allowed."

    def test_missing_file_field_is_rejected(self, client: TestClient) -> None:
        response = client.post("/api/upload-csv", data={"other": "x"})

        assert response.status_code == 422

    def test_missing_required_column(self, client: TestClient) -> None:
        response = client.post(
            "/api/upload-csv",
            files={"csvfile": ("contacts.csv", "first_name,last_name\nAnn,Lee\n", "text/csv")},
        )

        assert response.status_code == 400
        assert "email" in response.json()["detail"]
