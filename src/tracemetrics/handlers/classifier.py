"""Classification of trace events into page-load event kinds."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..core.types import TraceEvent


class PageLoadEventKind(Enum):
    """The closed set of page-load events, keyed by trace event name.

    Every member states whether it is a marker, i.e. a duration-less
    milestone shown on the timeline. A new member cannot be declared without
    making that decision.
    """

    MARK_DOM_CONTENT = ("MarkDOMContent", True)
    MARK_LOAD = ("MarkLoad", True)
    FIRST_PAINT = ("firstPaint", True)
    FIRST_CONTENTFUL_PAINT = ("firstContentfulPaint", True)
    LARGEST_CONTENTFUL_PAINT_CANDIDATE = ("largestContentfulPaint::Candidate", True)
    INTERACTIVE_TIME = ("InteractiveTime", False)
    LAYOUT_SHIFT = ("LayoutShift", False)

    def __init__(self, event_name: str, is_marker: bool) -> None:
        self.event_name = event_name
        self.is_marker = is_marker


_KINDS_BY_EVENT_NAME = {kind.event_name: kind for kind in PageLoadEventKind}

MARKER_EVENT_NAMES = tuple(kind.event_name for kind in PageLoadEventKind if kind.is_marker)


def page_load_event_kind(event: TraceEvent) -> Optional[PageLoadEventKind]:
    """Return the page-load kind of ``event``, or ``None`` for any other event."""
    return _KINDS_BY_EVENT_NAME.get(event.name)


def is_page_load_event(event: TraceEvent) -> bool:
    return page_load_event_kind(event) is not None


def is_marker_event(event: TraceEvent) -> bool:
    kind = page_load_event_kind(event)
    return kind is not None and kind.is_marker


__all__ = [
    "MARKER_EVENT_NAMES",
    "PageLoadEventKind",
    "is_marker_event",
    "is_page_load_event",
    "page_load_event_kind",
]
