"""
app/schemas/ingestion.py

Response schemas for CSV ingestion and job status endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.ingestion import IngestionSummary, JobRecord


class IngestionSummaryResponse(BaseModel):
    """
    API response model for one processed upload.
    """

    file_path: str
    file_hash: str
    integration: str
    processed: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    total_rows: int = Field(default=0, ge=0)
    job_id: int | None = None
    duplicate: bool = False

    @classmethod
    def from_summary(cls, summary: IngestionSummary) -> IngestionSummaryResponse:
        return cls(**summary.to_dict())


class IngestionJobResponse(BaseModel):
    id: int
    integration_id: int
    file_path: str
    status: str
    total_rows: int = Field(default=0, ge=0)
    processed_rows: int = Field(default=0, ge=0)
    inserted_rows: int = Field(default=0, ge=0)
    error_rows: int = Field(default=0, ge=0)
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_record(cls, record: JobRecord) -> IngestionJobResponse:
        return cls(
            id=record.id,
            integration_id=record.integration_id,
            file_path=record.file_path,
            status=record.status,
            total_rows=record.total_rows,
            processed_rows=record.processed_rows,
            inserted_rows=record.inserted_rows,
            error_rows=record.error_rows,
            error_message=record.error_message,
            started_at=record.started_at,
            completed_at=record.completed_at,
        )


class IngestionJobListResponse(BaseModel):
    jobs: list[IngestionJobResponse] = Field(default_factory=list)
