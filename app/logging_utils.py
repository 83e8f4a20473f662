"""
app/logging_utils.py

Logging setup and structured event helpers for the ingestion workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging once; ``level`` defaults to ``LOG_LEVEL``.
    """

    if level is None:
        from app.config import get_logging_settings

        level = get_logging_settings().level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
