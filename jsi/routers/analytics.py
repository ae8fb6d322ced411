"""Population analytics endpoints: stats, trends, anomalies, baselines, reports."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from jsi.models import Baseline, CustomerProfile, DateRange
from jsi.pipelines import JSIPipeline
from jsi.routers.deps import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jsi/customers", tags=["Analytics"])


@router.get("/{customer_id}/stats", summary="Aggregate Stats")
async def get_stats(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Score bands, risk levels and trend counts over the insights window."""
    return pipeline.aggregate_stats(customer_id, department, location, window_days).to_dict()


@router.get("/{customer_id}/trends", summary="Trend Analysis")
async def get_trends(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    granularity: Optional[str] = Query(None, description="day, week or month"),
    window_days: Optional[int] = Query(None, ge=1),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    report = pipeline.get_trend(customer_id, department, location, granularity, window_days)
    return report.to_dict()


@router.get("/{customer_id}/anomalies", summary="Detect Anomalies")
async def get_anomalies(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.detect_anomalies(customer_id, department, location, window_days).to_dict()


@router.post("/{customer_id}/baseline", response_model=Baseline, summary="Establish Baseline")
async def establish_baseline(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Recompute the slice's baseline over the trailing window and store it."""
    return pipeline.establish_baseline(customer_id, department, location, window_days)


@router.get("/{customer_id}/baseline", response_model=Baseline, summary="Get Baseline")
async def get_baseline(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.get_baseline(customer_id, department, location)


@router.put("/{customer_id}/profile", response_model=CustomerProfile, summary="Register Customer")
async def register_customer(
    customer_id: str,
    industry_code: Optional[str] = Query(None),
    industry_name: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Record the customer's industry so benchmarks can resolve its peers."""
    profile = CustomerProfile(
        customer_id=customer_id,
        industry_code=industry_code,
        industry_name=industry_name,
    )
    return pipeline.register_customer(profile)


@router.get("/{customer_id}/benchmarks", summary="Benchmarks")
async def get_benchmarks(
    customer_id: str,
    start: Optional[str] = Query(None, description="ISO date or datetime"),
    end: Optional[str] = Query(None, description="ISO date or datetime"),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    date_range = DateRange(start=start or "", end=end or "") if start or end else None
    benchmarks = pipeline.get_benchmarks(customer_id, date_range)
    return benchmarks.model_dump(mode="json", by_alias=True)


@router.get("/{customer_id}/report", summary="Report Data")
async def get_report(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.report_data(customer_id, department, location, window_days).to_dict()


@router.get("/{customer_id}/insights", summary="Generate Insights")
async def get_insights(
    customer_id: str,
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    include_organizational: bool = Query(False),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    insights = pipeline.generate_insights(
        customer_id, department, location, window_days, include_organizational
    )
    return insights.to_dict()


@router.get("/{customer_id}/export", summary="Export Data")
async def export_data(
    customer_id: str,
    format: str = Query(..., description="csv or json"),
    export_type: str = Query("detailed", description="detailed or summary"),
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    window_days: Optional[int] = Query(None, ge=1),
    include_personal_wellbeing: bool = Query(False),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    result = pipeline.export_report(
        customer_id,
        format,
        export_type,
        department=department,
        location=location,
        window_days=window_days,
        include_personal_wellbeing=include_personal_wellbeing,
    )
    return result.to_dict()
