"""Response envelopes shared by the JSI routers."""
from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Engine health: version, in-memory store status and its size."""
    status: str = Field(..., description="healthy while the record store answers")
    timestamp: str = Field(..., description="ISO timestamp (UTC)")
    version: str = Field(..., description="Engine version")
    dependencies: dict[str, str] = Field(
        default_factory=lambda: {"store": "healthy"},
        description="Status per collaborator; only the record store today",
    )
    score_count: int = Field(0, ge=0, description="Score records held by the store")


class ErrorResponse(BaseModel):
    """Body returned for every JSIError raised by the engine."""
    detail: str = Field(..., description="Human-readable error message")
    error_code: Optional[str] = Field(
        None,
        description=(
            "config_disabled, validation_error, empty_population, not_found, "
            "no_eligible_topics or unsupported_format"
        ),
    )
    field: Optional[str] = Field(None, description="Offending input field, when known")
