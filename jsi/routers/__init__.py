"""Routers package - API endpoint routers."""
from .health import router as health_router
from .scores import router as scores_router
from .analytics import router as analytics_router
from .messaging import router as messaging_router

__all__ = [
    "health_router",
    "scores_router",
    "analytics_router",
    "messaging_router",
]
