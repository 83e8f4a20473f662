"""
db/models/processed_file.py

Dedup ledger: content hashes of files already ingested per integration.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, IntegerIdMixin


class ProcessedFile(IntegerIdMixin, Base):
    __tablename__ = "data_source_files"

    integration_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("integrations.id"),
        nullable=False,
    )
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, comment="SHA-256 hex digest")
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False)
    job_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("ingestion_jobs.id"),
        nullable=True,
    )
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("integration_id", "file_hash", name="uq_data_source_files_integration_hash"),
    )
