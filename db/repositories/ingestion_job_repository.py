"""
db/repositories/ingestion_job_repository.py

Persistence for ingestion job rows: creation, terminal updates and lookup.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.ingestion import IngestionJobStatus, JobUpdate
from db.models.ingestion_job import IngestionJob

_TERMINAL_STATUSES = frozenset({IngestionJobStatus.COMPLETED, IngestionJobStatus.FAILED})
_OPTIONAL_FIELDS = ("total_rows", "processed_rows", "inserted_rows", "error_rows", "error_message")


class IngestionJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(self, *, integration_id: int, file_path: str, total_rows: int = 0) -> IngestionJob:
        """Insert a PENDING job and flush so its id is available."""
        job = IngestionJob(
            integration_id=integration_id,
            file_path=file_path,
            status=IngestionJobStatus.PENDING,
            total_rows=total_rows,
        )
        self._session.add(job)
        self._session.flush()
        return job

    def get_job(self, job_id: int) -> IngestionJob | None:
        return self._session.get(IngestionJob, job_id)

    def list_jobs(self, *, limit: int = 20, status: str | None = None) -> list[IngestionJob]:
        stmt = select(IngestionJob)
        if status:
            stmt = stmt.where(IngestionJob.status == status)
        stmt = stmt.order_by(IngestionJob.started_at.desc(), IngestionJob.id.desc()).limit(max(1, limit))
        return list(self._session.scalars(stmt))

    def apply_update(self, *, job_id: int, update: JobUpdate) -> IngestionJob | None:
        """
        Set the status and every non-``None`` field of ``update``.

        COMPLETED and FAILED also stamp ``completed_at``.
        """

        job = self.get_job(job_id)
        if job is None:
            return None

        job.status = update.status
        for name in _OPTIONAL_FIELDS:
            value = getattr(update, name)
            if value is not None:
                setattr(job, name, value)
        if update.status in _TERMINAL_STATUSES:
            job.completed_at = datetime.now(timezone.utc)
        self._session.flush()
        return job
