"""
app/domain/ingestion.py

Domain models used by the file ingestion flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

NormalizedRecord = dict[str, Any]
"""Target field name -> typed value for one mapped row."""

RawRecord = dict[str, str]
"""Header name -> raw cell string for one data row."""


class IngestionJobStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class JobUpdate:
    """
    Terminal bookkeeping applied to an ingestion job.

    Count fields left as ``None`` keep their stored value.
    """

    status: str
    total_rows: int | None = None
    processed_rows: int | None = None
    inserted_rows: int | None = None
    error_rows: int | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run summary for one file.
    """

    file_path: str
    file_hash: str
    integration_name: str
    processed: int
    skipped: int
    total_rows: int = 0
    job_id: int | None = None
    duplicate: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "file_hash": self.file_hash,
            "integration": self.integration_name,
            "processed": self.processed,
            "skipped": self.skipped,
            "total_rows": self.total_rows,
            "job_id": self.job_id,
            "duplicate": self.duplicate,
        }


@dataclass
class JobRecord:
    """
    Read view of one ingestion job.
    """

    id: int
    integration_id: int
    file_path: str
    status: str = IngestionJobStatus.PENDING
    total_rows: int = 0
    processed_rows: int = 0
    inserted_rows: int = 0
    error_rows: int = 0
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def apply(self, update: JobUpdate, *, completed_at: datetime | None = None) -> None:
        self.status = update.status
        for name in ("total_rows", "processed_rows", "inserted_rows", "error_rows"):
            value = getattr(update, name)
            if value is not None:
                setattr(self, name, value)
        if update.error_message is not None:
            self.error_message = update.error_message
        if update.status != IngestionJobStatus.PENDING:
            self.completed_at = completed_at
