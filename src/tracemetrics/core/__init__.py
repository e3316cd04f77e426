"""
Core abstractions and shared infrastructure for trace analysis.
"""

from .errors import (
    DataIntegrityError,
    HandlerDependencyError,
    HandlerStateError,
    InternalConsistencyError,
    TraceMetricsError,
)
from .handler import HandlerState, TraceHandler
from .registry import HandlerRegistry
from .types import (
    MetricName,
    MetricScore,
    NavigationRecord,
    PipelineConfig,
    ProcessWindow,
    ScoreClassification,
    TraceEvent,
)

__all__ = [
    "DataIntegrityError",
    "HandlerDependencyError",
    "HandlerRegistry",
    "HandlerState",
    "HandlerStateError",
    "InternalConsistencyError",
    "MetricName",
    "MetricScore",
    "NavigationRecord",
    "PipelineConfig",
    "ProcessWindow",
    "ScoreClassification",
    "TraceEvent",
    "TraceHandler",
    "TraceMetricsError",
]
