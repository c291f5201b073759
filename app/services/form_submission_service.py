"""
app/services/form_submission_service.py

Single-record path used by the web form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import lru_cache

from app.domain.contact import ContactRecord, Source
from app.repositories.contact_repository import ContactStore
from app.validators.contact_validator import validate_record
from app.validators.field_rules import normalize_phone
from app.validators.sanitizer import sanitize_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormSubmissionOutcome:
    """
    Result of one form submission: either the stored record or the violations.
    """

    record: ContactRecord | None = None
    violations: tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.record is not None and not self.violations


class FormSubmissionService:
    """
    Sanitizes, validates and upserts one contact.

    Store errors (ContactConflictError, ContactPersistenceError) propagate to
    the caller unchanged.
    """

    def submit(self, submitted: ContactRecord, store: ContactStore) -> FormSubmissionOutcome:
        record = sanitize_record(submitted)
        validation = validate_record(record, Source.FORM)
        if not validation.valid:
            return FormSubmissionOutcome(violations=validation.violations)

        normalized = replace(record, phone_number=normalize_phone(record.phone_number))
        stored = store.upsert(normalized)
        logger.info("Form contact stored email=%r", stored.email)
        return FormSubmissionOutcome(record=stored)


@lru_cache(maxsize=1)
def get_form_submission_service() -> FormSubmissionService:
    return FormSubmissionService()
