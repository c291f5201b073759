"""
app/repositories package marker.
"""

from app.repositories.contact_repository import ContactRepository, ContactStore

__all__ = [
    "ContactRepository",
    "ContactStore",
]
