"""
app/repositories/contact_repository.py

Persistence layer for contact records keyed by email.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any, Protocol

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.contact import ContactRecord
from db.models.contact_record import ContactRecordRow
from db.repositories.errors import ContactConflictError, ContactPersistenceError

_DEFAULT_BATCH_SIZE = 1000
_PERSISTED_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "eircode",
    "age",
)
# Each source only overwrites the fields it carries, so a CSV upload keeps the
# phone/eircode of an earlier form submission and vice versa for age.
_BATCH_UPDATE_FIELDS: tuple[str, ...] = ("first_name", "last_name", "age")
_FORM_UPDATE_FIELDS: tuple[str, ...] = ("first_name", "last_name", "phone_number", "eircode")


class ContactStore(Protocol):
    """
    Store collaborator used by the ingestion services.
    """

    def upsert(self, record: ContactRecord) -> ContactRecord:
        ...

    def bulk_upsert(self, records: Sequence[ContactRecord]) -> int:
        ...


class ContactRepository:
    """
    SQLAlchemy-backed contact store.

    With ``upsert_on_email`` (default) writes are insert-or-update on the
    email key. Without it a duplicate email raises ContactConflictError.
    """

    def __init__(
        self,
        session: Session,
        *,
        upsert_on_email: bool = True,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> None:
        self._session = session
        self._upsert_on_email = upsert_on_email
        self._batch_size = max(1, batch_size)

    def upsert(self, record: ContactRecord) -> ContactRecord:
        """
        Write one form-sourced record in its own transaction.
        """

        payload = _to_payload(record)
        stmt = self._insert_statement([payload], update_fields=_FORM_UPDATE_FIELDS)
        self._execute_atomic([stmt], email=payload["email"])
        return replace(record, email=payload["email"])

    def bulk_upsert(self, records: Sequence[ContactRecord]) -> int:
        """
        Write all records in one transaction; nothing is committed on failure.

        With upsert enabled, when one email appears more than once the last
        occurrence wins. Otherwise a repeated email raises ContactConflictError.
        """

        if not records:
            return 0

        payloads = [_to_payload(record) for record in records]
        if self._upsert_on_email:
            payloads = self._deduplicate_payloads(payloads)
        statements = [
            self._insert_statement(
                payloads[start : start + self._batch_size],
                update_fields=_BATCH_UPDATE_FIELDS,
            )
            for start in range(0, len(payloads), self._batch_size)
        ]
        self._execute_atomic(statements)
        return len(payloads)

    def get_by_email(self, email: str) -> ContactRecordRow | None:
        stmt = select(ContactRecordRow).where(ContactRecordRow.email == _email_key(email))
        return self._session.scalars(stmt).first()

    def count(self) -> int:
        return self._session.scalar(select(func.count()).select_from(ContactRecordRow)) or 0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert_statement(
        self,
        payloads: Sequence[dict[str, Any]],
        *,
        update_fields: Sequence[str],
    ) -> Any:
        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(ContactRecordRow).values(list(payloads))
        elif dialect == "sqlite":
            stmt = sqlite.insert(ContactRecordRow).values(list(payloads))
        else:
            raise ContactPersistenceError(f"Unsupported database dialect: {dialect}")

        if not self._upsert_on_email:
            return stmt
        # ON CONFLICT bypasses ORM onupdate hooks.
        updates: dict[str, Any] = {name: stmt.excluded[name] for name in update_fields}
        updates["updated_at"] = func.now()
        return stmt.on_conflict_do_update(
            index_elements=[ContactRecordRow.email],
            set_=updates,
        )

    def _execute_atomic(self, statements: Sequence[Any], *, email: str | None = None) -> None:
        try:
            for stmt in statements:
                self._session.execute(stmt)
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            if _is_unique_violation(exc):
                raise ContactConflictError(email) from exc
            raise ContactPersistenceError("Contact rows violate a table constraint.") from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise ContactPersistenceError("Failed to persist contact records.") from exc

    def _deduplicate_payloads(
        self,
        payloads: Sequence[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        by_email: dict[str, dict[str, Any]] = {}
        for payload in payloads:
            by_email.pop(payload["email"], None)
            by_email[payload["email"]] = payload
        return list(by_email.values())


def _email_key(email: str) -> str:
    return email.strip().lower()


def _to_payload(record: ContactRecord) -> dict[str, Any]:
    payload = record.to_payload()
    values = {name: None if payload[name] == "" else payload[name] for name in _PERSISTED_FIELDS}
    values["email"] = _email_key(values["email"])
    return values


def _is_unique_violation(exc: IntegrityError) -> bool:
    # 23505 is PostgreSQL's unique_violation SQLSTATE.
    if getattr(exc.orig, "sqlstate", None) == "23505":
        return True
    return "UNIQUE constraint failed" in str(exc.orig)
