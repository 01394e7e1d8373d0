"""
Shared fixtures: in-memory SQLite stores and dict-backed stores.
"""
from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from sqlmodel import Session

from blogmigrate.core.config import get_settings
from blogmigrate.core.database import create_store_engine, init_store
from blogmigrate.schemas.dto import MigrationReport
from blogmigrate.stores import BlogStore, open_sql_store
from tests.lib import make_memory_store

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Deterministic timestamp so stores return records in seed order."""
    return BASE_TIME + timedelta(minutes=minutes)


def _sql_store(label: str) -> Iterator[BlogStore]:
    engine = create_store_engine("sqlite:///:memory:")
    init_store(engine)
    session = Session(engine)
    try:
        yield open_sql_store(session, label)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def sql_source() -> Iterator[BlogStore]:
    yield from _sql_store("source")


@pytest.fixture()
def sql_target() -> Iterator[BlogStore]:
    yield from _sql_store("target")


@pytest.fixture()
def memory_source() -> BlogStore:
    return make_memory_store("source")


@pytest.fixture()
def memory_target() -> BlogStore:
    return make_memory_store("target")


@pytest.fixture()
def report() -> MigrationReport:
    return MigrationReport()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
