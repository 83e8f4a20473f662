"""
db/session.py

SQLAlchemy engine and session factory.

The engine is created on first use so that importing models, the CLI
parser or the FastAPI app never opens a connection pool.
"""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import EngineOptions, resolve_database_url

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def create_db_engine(database_url: str | None = None, options: EngineOptions | None = None) -> Engine:
    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    options = options or EngineOptions.from_env()
    return create_engine(
        url,
        echo=options.echo,
        pool_pre_ping=True,
        pool_recycle=options.pool_recycle,
        pool_size=options.pool_size,
        max_overflow=options.max_overflow,
    )


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    """Open a session on the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session for one unit of work; rolled back if the block raises.

    Committing is left to the caller.
    """

    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    with session_scope() as db:
        yield db


def dispose_engine() -> None:
    """Close pooled connections, e.g. at CLI exit or app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
