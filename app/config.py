"""
app/config.py

Environment-driven settings for ingestion, reporting and logging.

Every ``get_*_settings`` accessor is cached; tests that need different
values construct the settings dataclasses directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, TypeVar

from db.config import load_env_files

T = TypeVar("T")


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _read_env(name: str, default: T, parse: Callable[[str], T]) -> T:
    """
    Parse ``name`` from the environment; blank or unparseable values give ``default``.
    """

    _load_env_once()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for CSV ingestion.
    """

    match_threshold: float = 0.7
    progress_log_interval: int = 100
    hash_chunk_size: int = 65536
    default_currency: str = "GBP"


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Limits for the reporting queries.
    """

    top_n: int = 10
    min_orders_for_failure_rank: int = 5


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    threshold = _read_env("INGEST_MATCH_THRESHOLD", 0.7, float)
    if not 0.0 <= threshold < 1.0:
        threshold = 0.7

    return IngestionSettings(
        match_threshold=threshold,
        progress_log_interval=max(1, _read_env("INGEST_PROGRESS_LOG_INTERVAL", 100, int)),
        hash_chunk_size=max(1024, _read_env("INGEST_HASH_CHUNK_SIZE", 65536, int)),
        default_currency=_read_env("INGEST_DEFAULT_CURRENCY", "GBP", str).upper()[:3],
    )


@lru_cache(maxsize=1)
def get_analysis_settings() -> AnalysisSettings:
    """
    Return cached reporting settings from environment variables.
    """

    return AnalysisSettings(
        top_n=max(1, _read_env("ANALYSIS_TOP_N", 10, int)),
        min_orders_for_failure_rank=max(1, _read_env("ANALYSIS_MIN_ORDERS", 5, int)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=_read_env("LOG_LEVEL", "INFO", str).upper())
