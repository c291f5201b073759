from __future__ import annotations

import logging
import os
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response

from app.config import get_logging_settings
from app.logging_utils import configure_logging
from app.schemas.contact import HealthResponse
from db.session import Database

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Validate required environment variables before the store is created.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not (database_url or cloud_database_url or local_database_url):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    max_file_size = os.getenv("MAX_FILE_SIZE", "").strip()
    if max_file_size and (not max_file_size.isdigit() or int(max_file_size) <= 0):
        errors.append(f"MAX_FILE_SIZE='{max_file_size}' must be a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Initialise the contact store on boot; release its pool on exit."""
    database: Database = application.state.database
    database.init()
    application.state.started_at = time.monotonic()
    try:
        yield
    finally:
        database.shutdown()


async def _log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s - %s - %.0fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


def create_app(database: Database | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Serve with ``uvicorn app.main:create_app --factory``. Pass ``database``
    to reuse an existing store handle instead of one built from the environment.
    """

    if database is None:
        _validate_env()
        database = Database()
    configure_logging(get_logging_settings().level)

    application = FastAPI(
        title="Contact Intake API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.state.database = database
    application.state.started_at = time.monotonic()
    application.middleware("http")(_log_requests)

    from app.api.routers import csv_ingestion_router, form_submission_router

    application.include_router(csv_ingestion_router)
    application.include_router(form_submission_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="Server is running",
            timestamp=datetime.now(timezone.utc),
            uptime_seconds=round(time.monotonic() - application.state.started_at, 3),
            database="Connected" if database.is_initialized else "Not initialised",
        )

    return application
