"""Trace handlers bundled with tracemetrics.

Handlers register themselves with ``tracemetrics.core.HandlerRegistry`` on
import.
"""

from .classifier import PageLoadEventKind, is_marker_event, is_page_load_event, page_load_event_kind
from .meta import MetaData, MetaHandler
from .page_load_metrics import PageLoadMetricsData, PageLoadMetricsHandler
from .renderer import RendererData, RendererHandler

__all__ = [
    "MetaData",
    "MetaHandler",
    "PageLoadEventKind",
    "PageLoadMetricsData",
    "PageLoadMetricsHandler",
    "RendererData",
    "RendererHandler",
    "is_marker_event",
    "is_page_load_event",
    "page_load_event_kind",
]
