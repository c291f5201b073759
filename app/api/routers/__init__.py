"""
app/api/routers package marker.
"""

from app.api.routers.csv_ingestion import router as csv_ingestion_router
from app.api.routers.form_submission import router as form_submission_router

__all__ = [
    "csv_ingestion_router",
    "form_submission_router",
]
