"""Shared router dependencies."""
from functools import lru_cache

from jsi.pipelines import JSIPipeline
from jsi.services import get_store


@lru_cache
def get_pipeline() -> JSIPipeline:
    """Process-wide pipeline over the shared in-memory store."""
    return JSIPipeline(get_store())
