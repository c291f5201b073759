"""
app/validators/sanitizer.py

Markup stripping applied to inbound string fields before validation.
"""

from __future__ import annotations

import re
from dataclasses import fields, replace
from typing import Any

from app.domain.contact import ContactRecord

_HTML_TAG = re.compile(r"<[^>]*>")
_UNSAFE_CHARACTERS = re.compile(r"[<>\"'&]")


def sanitize_field(value: Any) -> Any:
    """
    Strip tags, then the characters ``< > " ' &``, then surrounding whitespace.

    Non-string values are returned unchanged.
    """

    if not isinstance(value, str):
        return value
    without_tags = _HTML_TAG.sub("", value)
    return _UNSAFE_CHARACTERS.sub("", without_tags).strip()


def sanitize_record(record: ContactRecord) -> ContactRecord:
    changes = {
        item.name: sanitize_field(getattr(record, item.name))
        for item in fields(record)
        if isinstance(getattr(record, item.name), str)
    }
    return replace(record, **changes)
