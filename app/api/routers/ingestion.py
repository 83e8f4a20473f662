"""
app/api/routers/ingestion.py

CSV ingestion and job status HTTP endpoints.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_csv_upload, get_ingestion_store
from app.domain.errors import IngestionError, IngestionValidationError, StorageError
from app.schemas.ingestion import (
    IngestionJobListResponse,
    IngestionJobResponse,
    IngestionSummaryResponse,
)
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.storage.base import IngestionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ingestion", tags=["ingestion"])


def _spool_upload(file: UploadFile) -> str:
    with tempfile.NamedTemporaryFile("wb", suffix=".csv", delete=False) as handle:
        shutil.copyfileobj(file.file, handle)
        return handle.name


@router.post("/upload", response_model=IngestionSummaryResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    integration_key: str | None = Query(
        default=None,
        description="Optional integration key; detected from the header row when omitted",
    ),
    store: IngestionStore = Depends(get_ingestion_store),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> IngestionSummaryResponse:
    """
    Ingest one uploaded CSV export synchronously.
    """

    temp_path: str | None = None
    try:
        temp_path = _spool_upload(file)
        summary = ingestion_service.process_file(
            temp_path,
            integration_key,
            store=store,
            source_name=file.filename or temp_path,
        )
    except IngestionValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.to_dict(),
        ) from exc
    except IngestionError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()
        if temp_path is not None:
            try:
                os.remove(temp_path)
            except OSError:
                logger.warning("Could not remove temporary upload %s", temp_path)

    return IngestionSummaryResponse.from_summary(summary)


@router.get("/jobs", response_model=IngestionJobListResponse)
def list_jobs(
    status_filter: str | None = Query(default=None, alias="status", description="Filter by job status"),
    limit: int = Query(default=20, ge=1, le=500),
    store: IngestionStore = Depends(get_ingestion_store),
) -> IngestionJobListResponse:
    try:
        jobs = store.list_jobs(limit=limit, status=status_filter)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.to_dict(),
        ) from exc
    return IngestionJobListResponse(jobs=[IngestionJobResponse.from_record(job) for job in jobs])


@router.get("/jobs/{job_id}", response_model=IngestionJobResponse)
def get_job(
    job_id: int,
    store: IngestionStore = Depends(get_ingestion_store),
) -> IngestionJobResponse:
    try:
        job = store.get_job(job_id)
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.to_dict(),
        ) from exc
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ingestion job not found.")
    return IngestionJobResponse.from_record(job)
