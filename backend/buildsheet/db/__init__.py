"""
Database Layer - SQLAlchemy engine + session factory for the local document store.
"""
import logging
from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from buildsheet import config

logger = logging.getLogger("buildsheet-db")


class Base(DeclarativeBase):
    pass


def build_engine(url: Optional[str] = None) -> Engine:
    """
    Create an engine for ``url`` (defaults to BUILDSHEET_DATABASE_URL).

    In-memory SQLite needs a single shared connection, otherwise every
    checkout sees an empty database.
    """
    url = url or config.DATABASE_URL
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") == "sqlite:"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    """Create the document table if missing."""
    from buildsheet.models import orm_models  # noqa: F401
    Base.metadata.create_all(engine)
    logger.info("Document store initialized (%s)", engine.url.render_as_string(hide_password=True))


def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)
