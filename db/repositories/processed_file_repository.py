"""
Repository for the processed-file dedup ledger.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from db.models.processed_file import ProcessedFile


class ProcessedFileRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def exists(self, *, integration_id: int, file_hash: str) -> bool:
        stmt = (
            select(ProcessedFile.id)
            .where(ProcessedFile.integration_id == integration_id)
            .where(ProcessedFile.file_hash == file_hash)
            .limit(1)
        )
        return self._session.execute(stmt).first() is not None

    def record(
        self,
        *,
        integration_id: int,
        file_path: str,
        file_hash: str,
        total_rows: int,
        job_id: int | None,
    ) -> None:
        """
        Add a ledger row; an existing ``(integration_id, file_hash)`` entry wins.
        """

        stmt = (
            insert(ProcessedFile)
            .values(
                integration_id=integration_id,
                file_path=file_path,
                file_hash=file_hash,
                total_rows=total_rows,
                job_id=job_id,
            )
            .on_conflict_do_nothing(constraint="uq_data_source_files_integration_hash")
        )
        self._session.execute(stmt)
