"""
app/main.py

FastAPI application factory. Run with ``uvicorn --factory app.main:create_app``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.logging_utils import configure_logging
from app.schemas.health import HealthResponse

logger = logging.getLogger(__name__)


def _verify_database() -> None:
    """
    Fail startup unless the database answers and every ORM table exists.

    Does NOT auto-migrate; a missing table means ``alembic upgrade head``
    has not been run against this database.
    """
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(sa_inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Tables missing from the database: %s. Run migrations and restart.", ", ".join(missing))
        raise RuntimeError(f"Schema mismatch: missing tables {', '.join(missing)}.")


def _startup_checks_enabled() -> bool:
    value = os.getenv("API_STARTUP_CHECKS", "true").strip().lower()
    return value in {"1", "true", "yes", "on"}


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Verify the database on boot; release the pool on exit."""
    from db.session import dispose_engine

    if application.state.startup_checks:
        _verify_database()
        logger.info("Database connectivity and schema confirmed")
    try:
        yield
    finally:
        dispose_engine()


def create_app(*, startup_checks: bool | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``startup_checks`` defaults to the ``API_STARTUP_CHECKS`` environment flag.
    """

    configure_logging()

    application = FastAPI(
        title="Order Ingestion API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.state.startup_checks = (
        _startup_checks_enabled() if startup_checks is None else startup_checks
    )

    from app.api.routers import analysis_router, ingestion_router

    application.include_router(ingestion_router)
    application.include_router(analysis_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok")

    return application
