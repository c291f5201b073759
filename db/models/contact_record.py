"""
db/models/contact_record.py

Persisted contact row. One row per unique email.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ContactRecordRow(Base, TimestampMixin):
    """
    Contact captured from the web form or a CSV upload.

    phone_number and eircode are only filled by form submissions;
    age is only filled by CSV uploads.
    """

    __tablename__ = "contact_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(20), nullable=False)
    last_name: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Identity key for upserts",
    )
    phone_number: Mapped[str | None] = mapped_column(String(10), nullable=True)
    eircode: Mapped[str | None] = mapped_column(String(6), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "age IS NULL OR (age >= 0 AND age <= 120)",
            name="ck_contact_records_age_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<ContactRecordRow id={self.id} email={self.email!r}>"
