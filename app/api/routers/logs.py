"""
app/api/routers/logs.py

Severity counts for the service log file.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.services.log_analysis_service import (
    LogAnalysisError,
    LogAnalysisService,
    get_log_analysis_service,
)

router = APIRouter(prefix="/api", tags=["logs"])


@router.get("/logs", response_model=dict[str, int])
def analyze_logs(
    service: LogAnalysisService = Depends(get_log_analysis_service),
) -> dict[str, int]:
    try:
        return service.analyze()
    except LogAnalysisError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
