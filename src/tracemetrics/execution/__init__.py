"""Execution pipeline components for trace analysis runs."""

from .pipeline import PipelineResult, TracePipeline

__all__ = [
    "PipelineResult",
    "TracePipeline",
]
