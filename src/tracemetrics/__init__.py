"""
Core package for the tracemetrics trace analysis engine.

This module exposes the primary extension points so downstream packages can
import from a single namespace.
"""

from .core.errors import (
    DataIntegrityError,
    HandlerDependencyError,
    HandlerStateError,
    InternalConsistencyError,
    TraceMetricsError,
)
from .core.handler import TraceHandler
from .core.registry import HandlerRegistry
from .core.types import (
    MetricName,
    MetricScore,
    NavigationRecord,
    PipelineConfig,
    ProcessWindow,
    ScoreClassification,
    TraceEvent,
)
from .execution import PipelineResult, TracePipeline
from .handlers import MetaHandler, PageLoadMetricsData, PageLoadMetricsHandler, RendererHandler

__all__ = [
    "DataIntegrityError",
    "HandlerDependencyError",
    "HandlerRegistry",
    "HandlerStateError",
    "InternalConsistencyError",
    "MetaHandler",
    "MetricName",
    "MetricScore",
    "NavigationRecord",
    "PageLoadMetricsData",
    "PageLoadMetricsHandler",
    "PipelineConfig",
    "PipelineResult",
    "ProcessWindow",
    "RendererHandler",
    "ScoreClassification",
    "TraceEvent",
    "TraceHandler",
    "TracePipeline",
    "TraceMetricsError",
]
