"""
app/schemas package marker.
"""

from app.schemas.analysis import AnalysisReportResponse
from app.schemas.health import HealthResponse
from app.schemas.ingestion import (
    IngestionJobListResponse,
    IngestionJobResponse,
    IngestionSummaryResponse,
)

__all__ = [
    "AnalysisReportResponse",
    "HealthResponse",
    "IngestionJobListResponse",
    "IngestionJobResponse",
    "IngestionSummaryResponse",
]
