"""topomap dataset operation engine."""

from topomap.engine.registry import operation, Phase, get_registry
from topomap.engine.context import PipelineContext
from topomap.engine.pipeline import Pipeline, create_pipeline

__all__ = [
    "operation",
    "Phase",
    "get_registry",
    "PipelineContext",
    "Pipeline",
    "create_pipeline",
]
