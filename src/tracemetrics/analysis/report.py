"""Report builder for page load metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.types import MetricName, MetricScore, PipelineConfig, TraceEvent
from ..execution.pipeline import TracePipeline
from ..handlers.meta import MetaData
from ..handlers.page_load_metrics import PageLoadMetricsData
from .loader import load_trace_events


@dataclass(slots=True)
class PageLoadReport:
    trace_path: Optional[Path]
    main_frame_id: str
    first_fcp_ts: Optional[int]
    event_count: int
    # frame id -> navigation id -> navigation summary with its metrics.
    frames: Dict[str, Dict[str, Dict[str, Any]]]
    markers: List[Dict[str, Any]]
    warnings: List[str] = field(default_factory=list)


def first_fcp_timestamp(meta: MetaData, page_load: PageLoadMetricsData) -> Optional[int]:
    """Timestamp of the earliest main-frame FCP event, or ``None``.

    Useful as an initial timeline position, since the page is likely to show
    something by then.
    """

    navigations = page_load.metric_scores_by_frame_id.get(meta.main_frame_id)
    if not navigations:
        return None
    first: Optional[int] = None
    for metrics in navigations.values():
        fcp = metrics.get(MetricName.FCP)
        if fcp is None or fcp.event is None:
            continue
        if first is None or fcp.event.ts < first:
            first = fcp.event.ts
    return first


def metric_score_to_dict(score: MetricScore) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "metric": score.metric_name.value,
        "score": score.score,
        "classification": score.classification.value,
        "value_us": score.value,
        "estimated": score.estimated,
    }
    if score.event is not None:
        payload["ts"] = score.event.ts
    return payload


def marker_to_dict(event: TraceEvent, meta: MetaData) -> Dict[str, Any]:
    return {
        "name": event.name,
        "ts": event.ts,
        "relative_us": event.ts - meta.trace_bounds.min,
    }


def build_page_load_report(
    meta: MetaData,
    page_load: PageLoadMetricsData,
    *,
    main_frame_only: bool = True,
    trace_path: Optional[Path] = None,
    event_count: int = 0,
) -> PageLoadReport:
    """Turn finalized handler data into a JSON-ready report."""

    frames: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for frame_id, navigations in page_load.metric_scores_by_frame_id.items():
        if main_frame_only and frame_id != meta.main_frame_id:
            continue
        for navigation_id, metrics in navigations.items():
            record = meta.navigations_by_navigation_id.get(navigation_id)
            frames.setdefault(frame_id, {})[navigation_id] = {
                "url": record.url if record else "",
                "start_ts": record.ts if record else None,
                "metrics": [metric_score_to_dict(score) for score in metrics.values()],
            }

    warnings: List[str] = []
    if not meta.main_frame_id:
        warnings.append("trace does not identify a main frame")
    elif meta.main_frame_id not in page_load.metric_scores_by_frame_id:
        warnings.append("no page load metrics recorded for the main frame")

    return PageLoadReport(
        trace_path=trace_path,
        main_frame_id=meta.main_frame_id,
        first_fcp_ts=first_fcp_timestamp(meta, page_load),
        event_count=event_count,
        frames=frames,
        markers=[marker_to_dict(event, meta) for event in page_load.all_marker_events],
        warnings=warnings,
    )


def analyze_trace(trace_path: Path, *, main_frame_only: bool = True) -> PageLoadReport:
    """Load ``trace_path``, run the page load pipeline and build its report."""

    events = load_trace_events(trace_path)
    pipeline = TracePipeline(PipelineConfig(handlers=("PageLoadMetrics",)))
    result = pipeline.run(events)
    return build_page_load_report(
        result["Meta"],
        result["PageLoadMetrics"],
        main_frame_only=main_frame_only,
        trace_path=trace_path,
        event_count=result.event_count,
    )


def report_to_dict(report: PageLoadReport) -> Dict[str, Any]:
    return {
        "trace": str(report.trace_path) if report.trace_path else None,
        "main_frame_id": report.main_frame_id,
        "first_fcp_ts": report.first_fcp_ts,
        "event_count": report.event_count,
        "frames": report.frames,
        "markers": report.markers,
        "warnings": report.warnings,
    }


__all__ = [
    "PageLoadReport",
    "analyze_trace",
    "build_page_load_report",
    "first_fcp_timestamp",
    "marker_to_dict",
    "metric_score_to_dict",
    "report_to_dict",
]
