"""
db/session.py

Explicitly managed SQLAlchemy engine and session factory for the contact store.

Nothing here connects at import time. The application constructs one
``Database``, calls ``init()`` on startup and ``shutdown()`` on exit.
"""

from __future__ import annotations

import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, inspect as sa_inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.base import Base
from db.config import DatabaseSettings, get_database_settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: DatabaseSettings) -> Engine:
    if not settings.url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


class Database:
    """
    Handle over the store's connection pool.

    Pass an ``engine`` to reuse an existing one (tests use in-memory SQLite);
    otherwise the engine is built from environment settings in ``init()``.
    """

    def __init__(
        self,
        *,
        engine: Engine | None = None,
        settings: DatabaseSettings | None = None,
    ) -> None:
        self._engine = engine
        self._settings = settings
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database.init() has not been called.")
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._session_factory is not None

    def init(self, *, check_schema: bool = True) -> None:
        """
        Build the engine, confirm connectivity and (optionally) the schema.
        """

        if self._engine is None:
            self._engine = create_db_engine(self._settings or get_database_settings())

        self._session_factory = sessionmaker(
            bind=self._engine,
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self._check_connection()
        logger.info("Database connectivity confirmed")
        if check_schema:
            self._check_schema()
            logger.info("Database schema validated")

    def shutdown(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connections closed")
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database.init() has not been called.")
        return self._session_factory()

    def _check_connection(self) -> None:
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as exc:
            raise RuntimeError("Database unavailable.") from exc

    def _check_schema(self) -> None:
        """
        Every table on Base.metadata must exist. Does NOT auto-migrate.
        """

        import db.models  # noqa: F401

        actual = set(sa_inspect(self.engine).get_table_names())
        missing = set(Base.metadata.tables.keys()) - actual
        if missing:
            logger.critical(
                "Schema mismatch: %d table(s) absent from the database: %s. "
                "Run 'alembic upgrade head' and restart.",
                len(missing),
                ", ".join(sorted(missing)),
            )
            raise RuntimeError(
                f"Schema mismatch: {len(missing)} table(s) missing from the database "
                f"({', '.join(sorted(missing))}). Run migrations and restart."
            )


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a session from the application's Database.
    """

    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
