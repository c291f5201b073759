"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ContactIngestionSettings:
    """
    Runtime settings shared by the form and CSV ingestion paths.
    """

    upload_dir: str = "uploads"
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    upsert_on_email: bool = True
    log_validation_errors: bool = True
    bulk_batch_size: int = 1000


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@lru_cache(maxsize=1)
def get_contact_ingestion_settings() -> ContactIngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return ContactIngestionSettings(
        upload_dir=_get_str_env("UPLOAD_PATH", "uploads"),
        max_file_size=max(1, _get_int_env("MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)),
        upsert_on_email=_get_bool_env("CONTACT_UPSERT_ON_EMAIL", True),
        log_validation_errors=_get_bool_env("CSV_INGEST_LOG_VALIDATION_ERRORS", True),
        bulk_batch_size=max(1, _get_int_env("CSV_INGEST_BATCH_SIZE", 1000)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())
