"""
Analyze Routes — POST /analyze and POST /analyze/batch

Accept source units (full files or single-file unified diffs), run the
deterministic pipeline and return frozen reports.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from rulegate.api.dependencies import get_analysis_worker
from rulegate.config import settings
from rulegate.core.errors import UnknownProfileError
from rulegate.models.api_models import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
)
from rulegate.models.report_models import Report
from rulegate.workers.analysis_worker import AnalysisWorker

logger = logging.getLogger("rulegate.api.analyze")

router = APIRouter()


def _check_size(request: AnalyzeRequest) -> None:
    size = len(request.content.encode("utf-8"))
    if size > settings.max_unit_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=(
                f"Unit '{request.unit_id or '<unnamed>'}' is {size} bytes; "
                f"maximum is {settings.max_unit_size_bytes}"
            ),
        )


@router.post("/analyze", response_model=Report)
async def analyze(
    request: AnalyzeRequest,
    worker: AnalysisWorker = Depends(get_analysis_worker),
):
    """Analyse a single source unit."""
    _check_size(request)
    try:
        reports = await worker.analyze_batch([request])
    except UnknownProfileError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return reports[0]


@router.post("/analyze/batch", response_model=BatchAnalyzeResponse)
async def analyze_batch(
    request: BatchAnalyzeRequest,
    worker: AnalysisWorker = Depends(get_analysis_worker),
):
    """Analyse independent units concurrently; reports keep request order."""
    if not request.units:
        return BatchAnalyzeResponse(message="error", reports=[])

    for unit in request.units:
        _check_size(unit)

    try:
        reports = await worker.analyze_batch(request.units)
    except UnknownProfileError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(f"Analysed batch of {len(reports)} units")
    return BatchAnalyzeResponse(reports=reports)
