"""Database engine and session management.

Builds the engine for the hosted store from a URL plus a service
credential, and provides a transactional session scope.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tubedesk.db.schema import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, service_key: str | None = None) -> Engine:
    """Create a SQLAlchemy engine for the storage backend.

    The service key is injected as the URL password for network backends.
    SQLite URLs ignore it and get thread-safety settings suitable for
    FastAPI's worker threads.

    Args:
        database_url: SQLAlchemy URL, e.g. ``postgresql+psycopg2://svc@host/db``.
        service_key: Credential for the service account.

    Returns:
        SQLAlchemy engine instance.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        # SQLite thread-safety config for FastAPI concurrency:
        # - check_same_thread=False: Allow multi-threaded access
        # - StaticPool: in-memory databases must share one connection
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)

    if service_key:
        url = url.set(password=service_key)
    logger.info(f"Connecting to {url.render_as_string(hide_password=True)}")
    return create_engine(url, echo=False, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory whose objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic cleanup.

    Commits on successful exit, rolls back on exception, and always
    closes the session.

    Args:
        factory: Session factory to draw the session from.

    Yields:
        SQLAlchemy Session instance.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create any missing tables.

    The hosted store is normally migrated out of band; this is for local
    development, demos and tests.

    Args:
        engine: Engine to create the schema on.
    """
    Base.metadata.create_all(engine)
