"""Health check endpoint."""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from jsi.config import get_settings
from jsi.models import HealthResponse
from jsi.pipelines import JSIPipeline
from jsi.routers.deps import get_pipeline

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check health status of the API and its record store.",
)
async def health_check(pipeline: JSIPipeline = Depends(get_pipeline)):
    """The engine is in-process; the only dependency is the in-memory store."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        dependencies={"store": "healthy"},
        score_count=len(pipeline.store.list_scores()),
    )
