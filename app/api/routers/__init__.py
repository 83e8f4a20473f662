"""
app/api/routers package marker.
"""

from app.api.routers.analysis import router as analysis_router
from app.api.routers.ingestion import router as ingestion_router

__all__ = [
    "analysis_router",
    "ingestion_router",
]
