"""Messaging configuration and prompt endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel

from jsi.models import CustomTopicCreate, MessagingConfig, MessagingConfigUpdate, MessagingTopic
from jsi.pipelines import JSIPipeline
from jsi.routers.deps import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jsi/customers", tags=["Messaging"])


class PromptRequest(BaseModel):
    """Optional overrides for prompt generation."""

    agency_id: Optional[str] = None
    strategy: Optional[str] = None


@router.get(
    "/{customer_id}/messaging-config",
    response_model=MessagingConfig,
    summary="Get Messaging Config",
)
async def get_messaging_config(
    customer_id: str,
    agency_id: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Returns the stored config, creating it from the default topics on first access."""
    return pipeline.get_messaging_config(customer_id, agency_id)


@router.put(
    "/{customer_id}/messaging-config",
    response_model=MessagingConfig,
    summary="Update Messaging Config",
)
async def update_messaging_config(
    customer_id: str,
    update: MessagingConfigUpdate,
    agency_id: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.update_messaging_config(customer_id, update, agency_id)


@router.post(
    "/{customer_id}/messaging-config/topics",
    response_model=MessagingTopic,
    status_code=status.HTTP_201_CREATED,
    summary="Add Custom Topic",
)
async def add_custom_topic(
    customer_id: str,
    topic: CustomTopicCreate,
    agency_id: Optional[str] = Query(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    return pipeline.add_custom_topic(customer_id, topic, agency_id)


@router.post("/{customer_id}/prompt", summary="Generate Prompt")
async def generate_prompt(
    customer_id: str,
    request: Optional[PromptRequest] = Body(None),
    pipeline: JSIPipeline = Depends(get_pipeline),
):
    """Select topics with the configured (or requested) strategy and render a prompt."""
    request = request or PromptRequest()
    selection = pipeline.generate_prompt(customer_id, request.agency_id, request.strategy)
    return selection.to_dict()
