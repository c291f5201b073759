"""
app/schemas/contact.py

Request and response schemas for the contact ingestion endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.contact import (
    BatchIngestionResult,
    BatchRowError,
    ContactRecord,
    RejectedRow,
)


# Accepted request keys for each form field, in lookup order.
FORM_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "first_name": ("first_name", "firstName"),
    "last_name": ("last_name", "lastName"),
    "email": ("email",),
    "phone_number": ("phone_number", "phoneNumber"),
    "eircode": ("eircode",),
}


class FormSubmissionRequest(BaseModel):
    """
    Web form payload. Field rules are applied by the service, not here, so
    every field is optional at this layer.

    Each field takes the first non-empty value among its accepted keys, so
    ``{"first_name": "", "firstName": "Ann"}`` resolves to ``Ann``.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    eircode: str | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        resolved: dict[str, Any] = {}
        for field_name, aliases in FORM_FIELD_ALIASES.items():
            resolved[field_name] = next(
                (data[key] for key in aliases if data.get(key) not in (None, "")),
                None,
            )
        return resolved

    def to_record(self) -> ContactRecord:
        return ContactRecord(**self.model_dump())


class ContactResponse(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    eircode: str | None = None
    age: int | None = None

    @classmethod
    def from_record(cls, record: ContactRecord) -> "ContactResponse":
        payload = record.to_payload()
        age = payload.get("age")
        return cls(
            first_name=_as_text(payload["first_name"]),
            last_name=_as_text(payload["last_name"]),
            email=_as_text(payload["email"]),
            phone_number=_as_text(payload["phone_number"]),
            eircode=_as_text(payload["eircode"]),
            age=age if isinstance(age, int) else None,
        )


class FormSubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Form data saved successfully"
    data: ContactResponse


class BatchRowData(BaseModel):
    """
    Candidate values of a rejected CSV row. An age that was not a number is null.
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    age: int | None = None


class RejectedRowResponse(BaseModel):
    row: int = Field(..., ge=1)
    data: BatchRowData
    errors: list[str] = Field(..., min_length=1)


class UnparseableRowResponse(BaseModel):
    row: int = Field(..., ge=1)
    error: str


class BatchSummaryResponse(BaseModel):
    """
    Per-upload summary, serialized with camelCase keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_rows: int = Field(..., ge=0, alias="totalRows")
    valid_records: int = Field(..., ge=0, alias="validRecords")
    invalid_records: int = Field(..., ge=0, alias="invalidRecords")
    errors: list[Union[RejectedRowResponse, UnparseableRowResponse]] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: BatchIngestionResult) -> "BatchSummaryResponse":
        return cls(
            total_rows=result.total_rows,
            valid_records=result.valid_records,
            invalid_records=result.invalid_records,
            errors=[_row_error_response(error) for error in result.errors],
        )


class BatchUploadResponse(BaseModel):
    success: bool = True
    message: str = "CSV processing completed"
    summary: BatchSummaryResponse


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime_seconds: float = Field(..., ge=0)
    database: str


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _row_error_response(
    error: BatchRowError,
) -> Union[RejectedRowResponse, UnparseableRowResponse]:
    if isinstance(error, RejectedRow):
        data = ContactResponse.from_record(error.data)
        return RejectedRowResponse(
            row=error.row,
            data=BatchRowData(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                age=data.age,
            ),
            errors=list(error.errors),
        )
    return UnparseableRowResponse(row=error.row, error=error.error)
