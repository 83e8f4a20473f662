"""
app/services package marker.
"""

from app.services.analysis_service import AnalysisReport, AnalysisService
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    compute_file_hash,
    get_csv_ingestion_service,
)

__all__ = [
    "AnalysisReport",
    "AnalysisService",
    "CSVIngestionService",
    "compute_file_hash",
    "get_csv_ingestion_service",
]
