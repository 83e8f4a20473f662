"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and storage wiring.
"""

from __future__ import annotations

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_analysis_settings
from app.services.analysis_service import AnalysisService
from app.storage.base import IngestionStore
from app.storage.sqlalchemy_storage import SQLAlchemyIngestionStore
from db.session import get_db

CSV_CONTENT_TYPES = frozenset({"text/csv", "application/csv", "application/vnd.ms-excel"})


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Accept the upload when either its filename ends in ``.csv`` or its MIME
    type is a CSV type. Content is not inspected here.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").split(";")[0].strip().lower()

    if filename.endswith(".csv") or content_type in CSV_CONTENT_TYPES:
        return file
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Only CSV files are allowed.",
    )


def get_ingestion_store(db: Session = Depends(get_db)) -> IngestionStore:
    return SQLAlchemyIngestionStore(session=db)


def get_analysis_service(db: Session = Depends(get_db)) -> AnalysisService:
    return AnalysisService(db, get_analysis_settings())
