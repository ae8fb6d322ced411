"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jsi.config import get_settings
from jsi.errors import (
    ConfigDisabled,
    EmptyPopulation,
    JSIError,
    NoEligibleTopics,
    NotFound,
    UnsupportedFormat,
    ValidationError,
)
from jsi.models import ErrorResponse
from jsi.routers import (
    analytics_router,
    health_router,
    messaging_router,
    scores_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[JSIError], int] = {
    ConfigDisabled: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EmptyPopulation: status.HTTP_404_NOT_FOUND,
    NotFound: status.HTTP_404_NOT_FOUND,
    NoEligibleTopics: status.HTTP_409_CONFLICT,
    UnsupportedFormat: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: JSIError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting {settings.app_name} v{settings.app_version}...")
    logger.info(f"Environment: {'DEBUG' if settings.debug else 'PRODUCTION'}")
    yield
    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        ## Job Satisfaction Insights API

        Worker satisfaction scoring and workforce analytics for staffing customers.

        ### Features:
        - Five-dimension JSI scoring with risk levels and flags
        - Trend analysis with momentum and confidence
        - Rapid-drop and sustained-low anomaly detection
        - Baselines, global and industry benchmarks
        - Insights, report data and CSV / JSON export
        - Messaging topic rotation for check-in prompts
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(scores_router)
    app.include_router(analytics_router)
    app.include_router(messaging_router)

    @app.exception_handler(JSIError)
    async def jsi_exception_handler(request: Request, exc: JSIError):
        code = status_for(exc)
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
        body = ErrorResponse(detail=exc.message, error_code=exc.error_code, field=exc.field)
        return JSONResponse(status_code=code, content=body.model_dump())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error": str(exc)}
        )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("jsi.main:app", host="0.0.0.0", port=8000, reload=True)
