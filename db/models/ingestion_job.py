"""
db/models/ingestion_job.py

One row per attempt to ingest a file.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.ingestion import IngestionJobStatus
from db.base import Base, IntegerIdMixin


class IngestionJob(IntegerIdMixin, Base):
    __tablename__ = "ingestion_jobs"

    integration_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("integrations.id"),
        nullable=False,
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=IngestionJobStatus.PENDING,
        server_default=IngestionJobStatus.PENDING,
        comment="pending, completed, failed",
    )
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    processed_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    inserted_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    error_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_ingestion_jobs_integration_id", "integration_id"),
        Index("ix_ingestion_jobs_status", "status"),
        Index("ix_ingestion_jobs_started_at", "started_at"),
    )
