"""Error taxonomy for trace analysis.

Data-integrity and internal-consistency errors are fatal: they abort the
finalize pass of the handler that raised them. Events that reference
navigations, frames or processes that were deliberately filtered upstream are
not errors at all; handlers drop them silently.
"""

from __future__ import annotations


class TraceMetricsError(RuntimeError):
    """Base class for all errors raised by the analysis engine."""


class DataIntegrityError(TraceMetricsError):
    """An event lacks an identifier its producer guarantees to emit."""


class InternalConsistencyError(TraceMetricsError):
    """Auxiliary data that must exist (main thread, tree node, ...) is missing."""


class HandlerDependencyError(TraceMetricsError):
    """Handler dependencies are cyclic or reference unknown handlers."""


class HandlerStateError(TraceMetricsError):
    """A handler was driven out of its reset/stream/finalize order."""


__all__ = [
    "DataIntegrityError",
    "HandlerDependencyError",
    "HandlerStateError",
    "InternalConsistencyError",
    "TraceMetricsError",
]
