"""
alembic/env.py

Migration environment for the order-ingestion schema (PostgreSQL only).

Target URL, first match wins:
  ``alembic -x db_url=...``, then ALEMBIC_DATABASE_URL, then the
  application's own DATABASE_URL / DB_* resolution.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

import db.models  # noqa: F401 registers every table on Base.metadata
from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def _migration_url() -> str:
    load_env_files()

    override = context.get_x_argument(as_dictionary=True).get("db_url") or os.getenv(
        "ALEMBIC_DATABASE_URL"
    )
    url = normalize_postgres_url(override) if override else resolve_database_url()

    if not url.startswith("postgresql"):
        raise RuntimeError("Migrations target PostgreSQL only; got a non-postgres URL.")
    return url


def run_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(_migration_url(), poolclass=NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata, **COMPARE_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
