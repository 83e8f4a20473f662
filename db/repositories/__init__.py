"""
Repository layer exports.
"""

from db.repositories.ingestion_job_repository import IngestionJobRepository
from db.repositories.processed_file_repository import ProcessedFileRepository

__all__ = [
    "IngestionJobRepository",
    "ProcessedFileRepository",
]
