"""
app/api/routers/analysis.py

Order analysis report endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies import get_analysis_service
from app.schemas.analysis import AnalysisReportResponse
from app.services.analysis_service import AnalysisService

router = APIRouter(tags=["analysis"])


@router.get("/analysis", response_model=AnalysisReportResponse)
def get_analysis(
    analysis_service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisReportResponse:
    try:
        report = analysis_service.build_report()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to build the analysis report.",
        ) from exc
    return AnalysisReportResponse.model_validate(report.to_dict())
