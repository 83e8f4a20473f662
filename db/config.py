"""
db/config.py

Database URL and connection pool settings, resolved from the environment.

``DATABASE_URL`` wins; otherwise the URL is assembled from ``DB_*`` parts
with local-development defaults. ``.env`` and ``.env.local`` at the project
root are read first but never override variables already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote_plus

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILES = (".env", ".env.local")

PSYCOPG_SCHEME = "postgresql+psycopg://"
_LEGACY_SCHEMES = ("postgres://", "postgresql://")

DB_PART_DEFAULTS = {
    "DB_HOST": "localhost",
    "DB_PORT": "5432",
    "DB_NAME": "orders_db",
    "DB_USER": "postgres",
    "DB_PASSWORD": "postgres",
}


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    if not sep or not key.strip():
        return None
    return key.strip(), value.strip().strip("\"'")


def load_env_files() -> None:
    for filename in ENV_FILES:
        env_path = PROJECT_ROOT / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            pair = _parse_env_line(raw_line)
            if pair is not None:
                os.environ.setdefault(*pair)


def normalize_postgres_url(url: str) -> str:
    """Rewrite bare postgres schemes to the psycopg 3 driver."""
    for scheme in _LEGACY_SCHEMES:
        if url.startswith(scheme):
            return PSYCOPG_SCHEME + url[len(scheme):]
    return url


def _env(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


def build_database_url_from_parts() -> str:
    parts = {name: _env(name, default) for name, default in DB_PART_DEFAULTS.items()}
    user = quote_plus(parts["DB_USER"])
    password = quote_plus(parts["DB_PASSWORD"])
    return f"{PSYCOPG_SCHEME}{user}:{password}@{parts['DB_HOST']}:{parts['DB_PORT']}/{parts['DB_NAME']}"


def resolve_database_url() -> str:
    load_env_files()
    direct_url = _env("DATABASE_URL", "")
    if direct_url:
        return normalize_postgres_url(direct_url)
    return build_database_url_from_parts()


@dataclass(frozen=True)
class EngineOptions:
    """
    Connection pool options read from SQL_ECHO / DB_POOL_* variables.
    """

    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800

    @classmethod
    def from_env(cls) -> EngineOptions:
        load_env_files()
        return cls(
            echo=_env("SQL_ECHO", "false").lower() in {"1", "true", "yes", "on"},
            pool_size=_env_int("DB_POOL_SIZE", cls.pool_size),
            max_overflow=_env_int("DB_MAX_OVERFLOW", cls.max_overflow),
            pool_recycle=_env_int("DB_POOL_RECYCLE", cls.pool_recycle),
        )


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env(name, str(default)))
    except ValueError:
        return default
