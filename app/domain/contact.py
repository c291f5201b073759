"""
app/domain/contact.py

Domain models shared by the form and CSV contact ingestion paths.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Union


class Source(str, Enum):
    """
    Origin of a contact record. Decides which fields are required.
    """

    FORM = "form"
    BATCH = "batch"


@dataclass(frozen=True)
class ContactRecord:
    """
    One contact entity. ``email`` is the identity key used for persistence.

    ``age`` holds ``math.nan`` when a batch value was present but not a number.
    """

    first_name: Any = None
    last_name: Any = None
    email: Any = None
    phone_number: Any = None
    eircode: Any = None
    age: Any = None

    @property
    def has_unparsed_age(self) -> bool:
        return isinstance(self.age, float) and math.isnan(self.age)

    def to_payload(self) -> dict[str, Any]:
        """
        Plain mapping of the record; an unparsed age is rendered as ``None``.
        """

        payload = asdict(self)
        if self.has_unparsed_age:
            payload["age"] = None
        return payload


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one record against one source.
    """

    violations: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations


@dataclass(frozen=True)
class RejectedRow:
    """
    A batch row that was read but failed one or more field rules.
    """

    row: int
    data: ContactRecord
    errors: tuple[str, ...]


@dataclass(frozen=True)
class UnparseableRow:
    """
    A batch row that could not be turned into a candidate record at all.
    """

    row: int
    error: str


BatchRowError = Union[RejectedRow, UnparseableRow]


@dataclass(frozen=True)
class BatchIngestionResult:
    """
    Per-upload summary. Never persisted.
    """

    total_rows: int
    accepted: list[ContactRecord] = field(default_factory=list)
    errors: list[BatchRowError] = field(default_factory=list)

    @property
    def valid_records(self) -> int:
        return len(self.accepted)

    @property
    def invalid_records(self) -> int:
        return len(self.errors)
