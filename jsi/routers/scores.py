"""Score generation and scoring-configuration endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status

from jsi.models import ScoreRecord, ScoreRequest, ScoringConfig
from jsi.pipelines import JSIPipeline
from jsi.routers.deps import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jsi", tags=["Scores"])


@router.post(
    "/scores",
    response_model=ScoreRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Generate JSI Score",
)
async def generate_score(
    request: ScoreRequest,
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Score one measurement event and store it as the worker's latest record."""
    return pipeline.generate_score(request)


@router.get(
    "/customers/{customer_id}/scoring-config",
    response_model=ScoringConfig,
    summary="Get Scoring Config",
)
async def get_scoring_config(
    customer_id: str,
    agency_id: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.get_scoring_config(customer_id, agency_id)


@router.put(
    "/customers/{customer_id}/scoring-config",
    response_model=ScoringConfig,
    summary="Update Scoring Config",
)
async def update_scoring_config(
    customer_id: str,
    override: dict[str, Any],
    agency_id: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Merge a partial override (weights, thresholds, enabled) into the stored one."""
    return pipeline.update_scoring_config(customer_id, override, agency_id)
