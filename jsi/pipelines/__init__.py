"""Pipelines package - JSI operations over a record store."""
from .jsi_pipeline import AlertSink, JSIPipeline

__all__ = [
    "AlertSink",
    "JSIPipeline",
]
