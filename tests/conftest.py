"""
Shared fixtures: an in-memory SQLite contact store and a recording fake store.
"""

from __future__ import annotations

from collections.abc import Generator, Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from app.domain.contact import ContactRecord
from db.base import Base


class RecordingStore:
    """
    Fake ContactStore that records every call. Set ``fail_with`` to make
    writes raise.
    """

    def __init__(self) -> None:
        self.upserts: list[ContactRecord] = []
        self.bulk_calls: list[list[ContactRecord]] = []
        self.fail_with: Exception | None = None

    def upsert(self, record: ContactRecord) -> ContactRecord:
        if self.fail_with is not None:
            raise self.fail_with
        self.upserts.append(record)
        return record

    def bulk_upsert(self, records: Sequence[ContactRecord]) -> int:
        if self.fail_with is not None:
            raise self.fail_with
        self.bulk_calls.append(list(records))
        return len(records)


@pytest.fixture()
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    db = factory()
    try:
        yield db
    finally:
        db.close()
