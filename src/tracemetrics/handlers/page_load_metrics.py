"""Page load metrics, including web vitals, per frame and per navigation.

Metrics are exported as ``frame id -> navigation id -> metric name -> score``
together with every main-frame marker event of the trace in time order.

Some metrics come straight from a single page load event (DCL, FCP, ...).
Others need several events: only the last LCP candidate of a navigation
counts, and TBT is estimated from main-thread tasks when the trace ends
before the page reported it.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, assert_never

from ..core.errors import DataIntegrityError, InternalConsistencyError
from ..core.handler import TraceHandler
from ..core.registry import HandlerRegistry
from ..core.timing import TimeUnit, format_microseconds, milliseconds_to_microseconds
from ..core.types import MetricName, MetricScore, NavigationRecord, ScoreClassification, TraceEvent
from .classifier import PageLoadEventKind, is_marker_event, is_page_load_event, page_load_event_kind
from .meta import MetaData
from .renderer import RUN_TASK, RendererData, RendererThread
from .scoring import (
    score_classification_for_dom_content_loaded,
    score_classification_for_first_contentful_paint,
    score_classification_for_largest_contentful_paint,
    score_classification_for_time_to_interactive,
    score_classification_for_total_blocking_time,
)

LONG_TASK_THRESHOLD = milliseconds_to_microseconds(50)

MetricTable = Dict[str, Dict[str, "OrderedDict[MetricName, MetricScore]"]]


@dataclass(slots=True, frozen=True)
class PageLoadMetricsData:
    # frame id -> navigation id -> metric name -> score. Per navigation, metrics
    # iterate in the order they were last stored.
    metric_scores_by_frame_id: Mapping[str, Mapping[str, Mapping[MetricName, MetricScore]]]
    # Marker events of the main frame, ascending by timestamp.
    all_marker_events: Tuple[TraceEvent, ...]


def store_metric_score(
    table: MetricTable,
    frame_id: str,
    navigation_id: str,
    metric_score: MetricScore,
) -> None:
    """Insert ``metric_score``, replacing any score with the same metric name.

    A replaced score moves to the end of its navigation's metrics, which keeps
    them ordered by the time they were determined.
    """

    metrics = table.setdefault(frame_id, {}).setdefault(navigation_id, OrderedDict())
    metrics[metric_score.metric_name] = metric_score
    metrics.move_to_end(metric_score.metric_name)


def _require_kind(event: TraceEvent) -> PageLoadEventKind:
    kind = page_load_event_kind(event)
    if kind is None:
        raise InternalConsistencyError(f"'{event.name}' is not a page load event")
    return kind


def frame_id_for_page_load_event(event: TraceEvent) -> Optional[str]:
    """Frame the event belongs to.

    DOMContentLoaded and Load must name their frame. For the other kinds a
    missing frame gives ``None`` and the event is dropped by its callers.
    """

    kind = _require_kind(event)
    match kind:
        case (
            PageLoadEventKind.FIRST_CONTENTFUL_PAINT
            | PageLoadEventKind.INTERACTIVE_TIME
            | PageLoadEventKind.LARGEST_CONTENTFUL_PAINT_CANDIDATE
            | PageLoadEventKind.LAYOUT_SHIFT
            | PageLoadEventKind.FIRST_PAINT
        ):
            return event.args.get("frame") or None
        case PageLoadEventKind.MARK_DOM_CONTENT | PageLoadEventKind.MARK_LOAD:
            frame_id = event.data.get("frame")
            if not frame_id:
                raise DataIntegrityError(f"{event.name} unexpectedly had no frame ID.")
            return frame_id
        case _:
            assert_never(kind)


def navigation_for_page_load_event(event: TraceEvent, meta: MetaData) -> Optional[NavigationRecord]:
    """Resolve the navigation ``event`` belongs to.

    ``None`` means Meta discarded the navigation as noise, or the event names
    no frame to look it up in.
    """

    kind = _require_kind(event)
    match kind:
        case (
            PageLoadEventKind.FIRST_CONTENTFUL_PAINT
            | PageLoadEventKind.LARGEST_CONTENTFUL_PAINT_CANDIDATE
            | PageLoadEventKind.FIRST_PAINT
        ):
            navigation_id = event.data.get("navigationId")
            if not navigation_id:
                raise DataIntegrityError(f"{event.name} unexpectedly had no navigation ID.")
            return meta.navigations_by_navigation_id.get(navigation_id)
        case (
            PageLoadEventKind.MARK_DOM_CONTENT
            | PageLoadEventKind.INTERACTIVE_TIME
            | PageLoadEventKind.LAYOUT_SHIFT
            | PageLoadEventKind.MARK_LOAD
        ):
            frame_id = frame_id_for_page_load_event(event)
            if frame_id is None:
                return None
            return meta.navigation_for_event(frame_id, event.ts)
        case _:
            assert_never(kind)


def _score(
    metric_name: MetricName,
    value: float,
    unit: TimeUnit,
    classification: ScoreClassification,
    event: TraceEvent,
    navigation: NavigationRecord,
) -> MetricScore:
    return MetricScore(
        metric_name=metric_name,
        score=format_microseconds(value, unit, maximum_fraction_digits=2),
        classification=classification,
        value=value,
        event=event,
        navigation=navigation,
    )


def _candidate_index(event: TraceEvent) -> int:
    candidate_index = event.data.get("candidateIndex")
    if candidate_index is None:
        raise DataIntegrityError("Largest Contentful Paint unexpectedly had no candidateIndex.")
    return candidate_index


def store_page_load_metric(
    table: MetricTable,
    selected_lcp_candidates: Set[TraceEvent],
    meta: MetaData,
    navigation: NavigationRecord,
    event: TraceEvent,
) -> None:
    frame_id = frame_id_for_page_load_event(event)
    if frame_id is None:
        return

    # Missing frame or process data means Meta discarded this frame/process
    # combination, so the metric is dropped with it.
    processes_in_frame = meta.renderer_processes_by_frame.get(frame_id)
    if not processes_in_frame:
        return
    window = processes_in_frame.get(event.pid)
    if window is None or not window.contains(event.ts):
        return

    navigation_id = navigation.navigation_id
    elapsed = event.ts - navigation.ts
    kind = _require_kind(event)

    match kind:
        case PageLoadEventKind.FIRST_CONTENTFUL_PAINT:
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.FCP, elapsed, TimeUnit.SECONDS,
                score_classification_for_first_contentful_paint(elapsed), event, navigation,
            ))
        case PageLoadEventKind.FIRST_PAINT:
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.FP, elapsed, TimeUnit.SECONDS,
                ScoreClassification.UNCLASSIFIED, event, navigation,
            ))
        case PageLoadEventKind.MARK_DOM_CONTENT:
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.DCL, elapsed, TimeUnit.SECONDS,
                score_classification_for_dom_content_loaded(elapsed), event, navigation,
            ))
        case PageLoadEventKind.MARK_LOAD:
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.L, elapsed, TimeUnit.SECONDS,
                ScoreClassification.UNCLASSIFIED, event, navigation,
            ))
        case PageLoadEventKind.INTERACTIVE_TIME:
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.TTI, elapsed, TimeUnit.SECONDS,
                score_classification_for_time_to_interactive(elapsed), event, navigation,
            ))
            payload = event.args.get("args") or {}
            blocking_ms = payload.get("total_blocking_time_ms")
            if blocking_ms is None:
                raise DataIntegrityError("InteractiveTime unexpectedly had no total_blocking_time_ms.")
            tbt = milliseconds_to_microseconds(blocking_ms)
            store_metric_score(table, frame_id, navigation_id, _score(
                MetricName.TBT, tbt, TimeUnit.MILLISECONDS,
                score_classification_for_total_blocking_time(tbt), event, navigation,
            ))
        case PageLoadEventKind.LARGEST_CONTENTFUL_PAINT_CANDIDATE:
            candidate_index = _candidate_index(event)
            lcp = _score(
                MetricName.LCP, elapsed, TimeUnit.SECONDS,
                score_classification_for_largest_contentful_paint(elapsed), event, navigation,
            )
            previous = table.get(frame_id, {}).get(navigation_id, {}).get(MetricName.LCP)
            if previous is None or previous.event is None:
                selected_lcp_candidates.add(event)
                store_metric_score(table, frame_id, navigation_id, lcp)
                return
            if _candidate_index(previous.event) < candidate_index:
                selected_lcp_candidates.discard(previous.event)
                selected_lcp_candidates.add(event)
                store_metric_score(table, frame_id, navigation_id, lcp)
        case PageLoadEventKind.LAYOUT_SHIFT:
            # Layout shifts feed CLS, which is computed elsewhere.
            return
        case _:
            assert_never(kind)


def estimated_blocking_time(fcp_ts: int, main_thread: RendererThread) -> float:
    """Sum the blocking portion of the top-level tasks running after ``fcp_ts``.

    Only the part of a task after FCP counts, and of that only what exceeds
    the long task threshold.
    """

    tree = main_thread.tree
    if tree is None:
        raise InternalConsistencyError("Main thread has no call tree.")
    events = main_thread.events
    total = 0.0
    for root_id in tree.roots:
        node = tree.nodes.get(root_id)
        if node is None:
            raise InternalConsistencyError(f"Node not found for id: {root_id}")
        if not 0 <= node.event_index < len(events):
            raise InternalConsistencyError(f"Event not found for index: {node.event_index}")
        task = events[node.event_index]
        if task.name != RUN_TASK or task.is_instant or task.dur is None:
            continue
        if task.end_ts < fcp_ts:
            continue
        time_before_fcp = fcp_ts - task.ts if task.ts < fcp_ts else 0
        clipped_duration = task.dur - time_before_fcp
        if clipped_duration > LONG_TASK_THRESHOLD:
            total += clipped_duration - LONG_TASK_THRESHOLD
    return total


def estimate_total_blocking_times(table: MetricTable, renderer: RendererData) -> None:
    """Estimate TBT for navigations that reached FCP but never reported TBT.

    This happens when the recording stops before the page settles. The
    estimate covers the blocking time between FCP and the end of the trace.
    """

    for frame_id, metrics_by_navigation in table.items():
        for navigation_id, metrics in list(metrics_by_navigation.items()):
            fcp = metrics.get(MetricName.FCP)
            if MetricName.TBT in metrics or fcp is None or fcp.event is None:
                continue
            process = renderer.processes.get(fcp.event.pid)
            if process is None:
                # Processes without a relevant origin (about:blank, ...) carry
                # nothing to estimate.
                continue
            main_thread = process.main_thread()
            if main_thread is None:
                raise InternalConsistencyError("Main thread not found.")
            tbt = estimated_blocking_time(fcp.event.ts, main_thread)
            store_metric_score(table, frame_id, navigation_id, MetricScore(
                metric_name=MetricName.TBT,
                score=format_microseconds(tbt, TimeUnit.MILLISECONDS, maximum_fraction_digits=2),
                classification=score_classification_for_total_blocking_time(tbt),
                value=tbt,
                navigation=fcp.navigation,
                estimated=True,
            ))


@HandlerRegistry.register("PageLoadMetrics")
class PageLoadMetricsHandler(TraceHandler[PageLoadMetricsData]):
    handler_name = "PageLoadMetrics"
    dependencies = ("Meta", "Renderer")

    def _reset_state(self) -> None:
        self._page_load_events: List[TraceEvent] = []
        self._metric_scores_by_frame_id: MetricTable = {}
        self._all_marker_events: List[TraceEvent] = []
        # The LCP candidates currently chosen as their navigation's LCP.
        self._selected_lcp_candidate_events: Set[TraceEvent] = set()

    def _handle_event(self, event: TraceEvent) -> None:
        if not is_page_load_event(event):
            return
        self._page_load_events.append(event)

    def _finalize(self, dependencies: Mapping[str, Any]) -> None:
        meta: MetaData = dependencies["Meta"]
        renderer: RendererData = dependencies["Renderer"]

        events = sorted(self._page_load_events, key=lambda event: event.ts)
        table: MetricTable = {}
        selected: Set[TraceEvent] = set()

        for event in events:
            navigation = navigation_for_page_load_event(event, meta)
            if navigation is not None:
                store_page_load_metric(table, selected, meta, navigation, event)

        estimate_total_blocking_times(table, renderer)

        markers = [
            event
            for event in events
            if is_marker_event(event)
            and (
                page_load_event_kind(event) is not PageLoadEventKind.LARGEST_CONTENTFUL_PAINT_CANDIDATE
                or event in selected
            )
            and frame_id_for_page_load_event(event) == meta.main_frame_id
        ]

        self._page_load_events = events
        self._metric_scores_by_frame_id = table
        self._selected_lcp_candidate_events = selected
        self._all_marker_events = markers

    @property
    def selected_lcp_candidate_events(self) -> frozenset[TraceEvent]:
        return frozenset(self._selected_lcp_candidate_events)

    def _data(self) -> PageLoadMetricsData:
        return PageLoadMetricsData(
            metric_scores_by_frame_id={
                frame_id: {
                    navigation_id: dict(metrics)
                    for navigation_id, metrics in metrics_by_navigation.items()
                }
                for frame_id, metrics_by_navigation in self._metric_scores_by_frame_id.items()
            },
            all_marker_events=tuple(self._all_marker_events),
        )


__all__ = [
    "LONG_TASK_THRESHOLD",
    "MetricTable",
    "PageLoadMetricsData",
    "PageLoadMetricsHandler",
    "estimate_total_blocking_times",
    "estimated_blocking_time",
    "frame_id_for_page_load_event",
    "navigation_for_page_load_event",
    "store_metric_score",
    "store_page_load_metric",
]
