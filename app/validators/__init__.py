"""
app/validators package marker.
"""

from app.validators.contact_validator import validate_record
from app.validators.field_rules import (
    is_valid_age,
    is_valid_eircode,
    is_valid_email,
    is_valid_name,
    is_valid_phone,
    normalize_phone,
    parse_age,
)
from app.validators.sanitizer import sanitize_field, sanitize_record

__all__ = [
    "is_valid_age",
    "is_valid_eircode",
    "is_valid_email",
    "is_valid_name",
    "is_valid_phone",
    "normalize_phone",
    "parse_age",
    "sanitize_field",
    "sanitize_record",
    "validate_record",
]
