"""
app/validators/field_rules.py

Per-field predicates for contact records.

Every function here is total: malformed or missing input returns False
(or a sentinel for ``parse_age``) instead of raising.
"""

from __future__ import annotations

import math
import re
from typing import Any

from email_validator import EmailNotValidError, validate_email

NAME_MAX_LENGTH = 20
PHONE_DIGITS = 10
MIN_AGE = 0
MAX_AGE = 120

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
_NON_DIGITS = re.compile(r"[^0-9]")
_PHONE_PATTERN = re.compile(rf"^[0-9]{{{PHONE_DIGITS}}}$")
_INTEGER_TEXT = re.compile(r"^[+-]?[0-9]+$")
_EIRCODE_PATTERN = re.compile(r"^[0-9][A-Za-z0-9]{5}$")

AGE_NOT_A_NUMBER = math.nan


def is_valid_name(value: Any) -> bool:
    """
    Return True for 1-20 letters/digits after trimming.
    """

    if not value or not isinstance(value, str):
        return False

    trimmed = value.strip()
    if not 0 < len(trimmed) <= NAME_MAX_LENGTH:
        return False
    return _NAME_PATTERN.fullmatch(trimmed) is not None


def is_valid_email(value: Any) -> bool:
    """
    Syntax-only email check; no DNS lookups.
    """

    if not value or not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def normalize_phone(value: Any) -> str:
    return _NON_DIGITS.sub("", str(value))


def is_valid_phone(value: Any) -> bool:
    if value is None or value == "":
        return False
    return _PHONE_PATTERN.fullmatch(normalize_phone(value)) is not None


def is_valid_eircode(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return _EIRCODE_PATTERN.fullmatch(value.strip()) is not None


def parse_age(value: Any) -> int | float | None:
    """
    Parse an age column value.

    Blank or missing values yield None (age absent). Anything else that is
    not a whole number yields ``AGE_NOT_A_NUMBER``.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return AGE_NOT_A_NUMBER
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return AGE_NOT_A_NUMBER

    text = str(value).strip()
    if not text:
        return None
    # int() alone would also take "1_00" and non-ASCII digits.
    if _INTEGER_TEXT.fullmatch(text) is None:
        return AGE_NOT_A_NUMBER
    return int(text)


def is_valid_age(value: Any) -> bool:
    parsed = parse_age(value)
    if parsed is None or not isinstance(parsed, int):
        return False
    return MIN_AGE <= parsed <= MAX_AGE
