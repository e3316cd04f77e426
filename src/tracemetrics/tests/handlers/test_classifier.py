from __future__ import annotations

import pytest

from tracemetrics.core.types import TraceEvent
from tracemetrics.handlers.classifier import (
    MARKER_EVENT_NAMES,
    PageLoadEventKind,
    is_marker_event,
    is_page_load_event,
    page_load_event_kind,
)


def _event(name: str) -> TraceEvent:
    return TraceEvent(name=name, ts=1, pid=1)


@pytest.mark.parametrize(
    "name",
    ["MarkDOMContent", "MarkLoad", "firstPaint", "firstContentfulPaint", "largestContentfulPaint::Candidate"],
)
def test_marker_events_are_markers_and_page_load_events(name: str) -> None:
    event = _event(name)

    assert is_marker_event(event)
    assert is_page_load_event(event)


@pytest.mark.parametrize("name", ["InteractiveTime", "LayoutShift"])
def test_non_marker_page_load_events(name: str) -> None:
    event = _event(name)

    assert not is_marker_event(event)
    assert is_page_load_event(event)


@pytest.mark.parametrize("name", ["RunTask", "navigationStart", "", "firstcontentfulpaint"])
def test_unrecognized_events_are_excluded(name: str) -> None:
    event = _event(name)

    assert page_load_event_kind(event) is None
    assert not is_marker_event(event)
    assert not is_page_load_event(event)


def test_kind_lookup_by_event_name() -> None:
    assert page_load_event_kind(_event("largestContentfulPaint::Candidate")) is (
        PageLoadEventKind.LARGEST_CONTENTFUL_PAINT_CANDIDATE
    )


def test_every_kind_declares_marker_status() -> None:
    assert {kind.event_name for kind in PageLoadEventKind if kind.is_marker} == set(MARKER_EVENT_NAMES)
    assert len(MARKER_EVENT_NAMES) == 5
    assert len(PageLoadEventKind) == 7
