"""
Engine and session helpers for the source and target stores.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from blogmigrate.core.logging_config import log_info
from blogmigrate.core.config import mask_credentials

# Register the tables on SQLModel.metadata before create_all runs.
from blogmigrate.models import Blog, Category  # noqa: F401


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for a store URL.

    In-memory SQLite URLs share a single connection so every session sees
    the same database.
    """
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, pool_pre_ping=True)


def init_store(engine: Engine) -> None:
    """Create the category and blog tables if they do not exist yet."""
    SQLModel.metadata.create_all(engine)
    log_info("Store schema ready", url=mask_credentials(str(engine.url)))


@contextmanager
def store_session(engine: Engine) -> Iterator[Session]:
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
