"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.contact_record import ContactRecordRow

__all__ = [
    "ContactRecordRow",
]
