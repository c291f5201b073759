"""
app/api/routers/form_submission.py

Web form contact submission endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_contact_store
from app.repositories.contact_repository import ContactRepository
from app.schemas.contact import ContactResponse, FormSubmissionRequest, FormSubmissionResponse
from app.services.form_submission_service import (
    FormSubmissionService,
    get_form_submission_service,
)
from db.repositories.errors import ContactConflictError, ContactPersistenceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contacts"])


@router.post("/submit-form", response_model=FormSubmissionResponse)
def submit_form(
    body: FormSubmissionRequest,
    store: ContactRepository = Depends(get_contact_store),
    service: FormSubmissionService = Depends(get_form_submission_service),
) -> FormSubmissionResponse:
    """
    Store one contact from the web form.

    Returns 400 with the ordered violation list when validation fails and
    409 when the store rejects a duplicate email.
    """

    try:
        outcome = service.submit(body.to_record(), store)
    except ContactConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already exists in database",
        ) from exc
    except ContactPersistenceError as exc:
        logger.error("Form submission could not be stored: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save form data",
        ) from exc

    if not outcome.accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": list(outcome.violations)},
        )

    return FormSubmissionResponse(data=ContactResponse.from_record(outcome.record))
