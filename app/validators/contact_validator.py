"""
app/validators/contact_validator.py

Record-level validation composed from the field rules.
"""

from __future__ import annotations

from app.domain.contact import ContactRecord, Source, ValidationResult
from app.validators.field_rules import (
    is_valid_age,
    is_valid_email,
    is_valid_eircode,
    is_valid_name,
    is_valid_phone,
)

FIRST_NAME_INVALID = "First name must contain only letters/numbers and be max 20 characters"
LAST_NAME_INVALID = "Last name must contain only letters/numbers and be max 20 characters"
EMAIL_INVALID = "Invalid email format"
PHONE_REQUIRED = "Phone number is required"
PHONE_INVALID = "Phone number must be exactly 10 digits"
EIRCODE_REQUIRED = "Eircode is required"
EIRCODE_INVALID = "Eircode must start with a number and be exactly 6 alphanumeric characters"
AGE_INVALID = "Age must be a number between 0 and 120"


def _is_missing(value: object) -> bool:
    return value is None or value == ""


def validate_record(record: ContactRecord, source: Source | str) -> ValidationResult:
    """
    Validate one record for the given source.

    Violations are always reported in field order (first_name, last_name,
    email, then the source-specific fields) so results are deterministic.
    """

    source = Source(source)
    violations: list[str] = []

    if not is_valid_name(record.first_name):
        violations.append(FIRST_NAME_INVALID)
    if not is_valid_name(record.last_name):
        violations.append(LAST_NAME_INVALID)
    if not is_valid_email(record.email):
        violations.append(EMAIL_INVALID)

    if source is Source.FORM:
        if _is_missing(record.phone_number):
            violations.append(PHONE_REQUIRED)
        elif not is_valid_phone(record.phone_number):
            violations.append(PHONE_INVALID)

        if _is_missing(record.eircode):
            violations.append(EIRCODE_REQUIRED)
        elif not is_valid_eircode(record.eircode):
            violations.append(EIRCODE_INVALID)
    elif record.age is not None and not is_valid_age(record.age):
        violations.append(AGE_INVALID)

    return ValidationResult(violations=tuple(violations))
