from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from tracemetrics.core.types import TraceEvent
from tracemetrics.execution.pipeline import PipelineResult, TracePipeline


class TraceBuilder:
    """Builds small synthetic Chrome traces for handler tests."""

    MAIN_FRAME = "MAIN_FRAME"
    CHILD_FRAME = "CHILD_FRAME"
    BROWSER_PID = 1
    RENDERER_PID = 2
    MAIN_TID = 10

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def add(
        self,
        name: str,
        ts: int,
        *,
        pid: Optional[int] = None,
        tid: Optional[int] = None,
        ph: str = "I",
        dur: Optional[int] = None,
        args: Optional[Dict[str, Any]] = None,
    ) -> TraceEvent:
        event = TraceEvent(
            name=name,
            ts=ts,
            pid=self.RENDERER_PID if pid is None else pid,
            tid=self.MAIN_TID if tid is None else tid,
            ph=ph,
            dur=dur,
            args=args or {},
        )
        self.events.append(event)
        return event

    def tracing_started(self, ts: int = 1, frames: Optional[List[Dict[str, Any]]] = None) -> TraceEvent:
        if frames is None:
            frames = [
                {"frame": self.MAIN_FRAME, "url": "https://example.com/", "processId": self.RENDERER_PID},
                {
                    "frame": self.CHILD_FRAME,
                    "url": "https://ads.example.com/",
                    "processId": self.RENDERER_PID,
                    "parent": self.MAIN_FRAME,
                },
            ]
        return self.add(
            "TracingStartedInBrowser",
            ts,
            pid=self.BROWSER_PID,
            args={"data": {"frames": frames}},
        )

    def thread_name(self, name: str = "CrRendererMain", *, pid: Optional[int] = None, tid: Optional[int] = None) -> TraceEvent:
        return self.add("thread_name", 0, pid=pid, tid=tid, ph="M", args={"name": name})

    def frame_committed(self, ts: int, frame: str, process_id: int) -> TraceEvent:
        return self.add(
            "FrameCommittedInBrowser",
            ts,
            pid=self.BROWSER_PID,
            args={"data": {"frame": frame, "processId": process_id, "url": "https://example.com/"}},
        )

    def navigation(
        self,
        navigation_id: str,
        ts: int,
        *,
        frame: Optional[str] = None,
        url: str = "https://example.com/",
        pid: Optional[int] = None,
    ) -> TraceEvent:
        frame = frame or self.MAIN_FRAME
        return self.add(
            "navigationStart",
            ts,
            pid=pid,
            args={
                "frame": frame,
                "data": {
                    "navigationId": navigation_id,
                    "documentLoaderURL": url,
                    "isLoadingMainFrame": frame == self.MAIN_FRAME,
                },
            },
        )

    def fcp(self, ts: int, navigation_id: Optional[str], *, frame: Optional[str] = None, pid: Optional[int] = None) -> TraceEvent:
        return self._paint("firstContentfulPaint", ts, navigation_id, frame=frame, pid=pid)

    def fp(self, ts: int, navigation_id: Optional[str], *, frame: Optional[str] = None, pid: Optional[int] = None) -> TraceEvent:
        return self._paint("firstPaint", ts, navigation_id, frame=frame, pid=pid)

    def lcp(
        self,
        ts: int,
        navigation_id: str,
        candidate_index: Optional[int],
        *,
        frame: Optional[str] = None,
        pid: Optional[int] = None,
    ) -> TraceEvent:
        data: Dict[str, Any] = {"navigationId": navigation_id}
        if candidate_index is not None:
            data["candidateIndex"] = candidate_index
        return self.add(
            "largestContentfulPaint::Candidate",
            ts,
            pid=pid,
            args={"frame": frame or self.MAIN_FRAME, "data": data},
        )

    def dcl(self, ts: int, *, frame: Optional[str] = None, pid: Optional[int] = None) -> TraceEvent:
        return self.add("MarkDOMContent", ts, pid=pid, args={"data": {"frame": frame or self.MAIN_FRAME}})

    def load(self, ts: int, *, frame: Optional[str] = None, pid: Optional[int] = None) -> TraceEvent:
        return self.add("MarkLoad", ts, pid=pid, args={"data": {"frame": frame or self.MAIN_FRAME}})

    def interactive(self, ts: int, tbt_ms: float, *, frame: Optional[str] = None, pid: Optional[int] = None) -> TraceEvent:
        return self.add(
            "InteractiveTime",
            ts,
            pid=pid,
            args={"frame": frame or self.MAIN_FRAME, "args": {"total_blocking_time_ms": tbt_ms}},
        )

    def layout_shift(self, ts: int, *, frame: Optional[str] = None) -> TraceEvent:
        return self.add("LayoutShift", ts, args={"frame": frame or self.MAIN_FRAME, "data": {}})

    def task(self, ts: int, dur: int, *, name: str = "RunTask", pid: Optional[int] = None, tid: Optional[int] = None) -> TraceEvent:
        return self.add(name, ts, pid=pid, tid=tid, ph="X", dur=dur)

    def run(self) -> PipelineResult:
        return TracePipeline().run(self.events)

    def to_dicts(self) -> List[Dict[str, Any]]:
        raw_events = []
        for event in self.events:
            raw: Dict[str, Any] = {
                "name": event.name,
                "cat": event.cat,
                "ph": event.ph,
                "ts": event.ts,
                "pid": event.pid,
                "tid": event.tid,
                "args": dict(event.args),
            }
            if event.dur is not None:
                raw["dur"] = event.dur
            raw_events.append(raw)
        return raw_events

    def write(self, path: Path) -> Path:
        path.write_text(json.dumps({"traceEvents": self.to_dicts()}), encoding="utf-8")
        return path

    def _paint(
        self,
        name: str,
        ts: int,
        navigation_id: Optional[str],
        *,
        frame: Optional[str],
        pid: Optional[int],
    ) -> TraceEvent:
        data: Dict[str, Any] = {}
        if navigation_id is not None:
            data["navigationId"] = navigation_id
        return self.add(name, ts, pid=pid, args={"frame": frame or self.MAIN_FRAME, "data": data})


@pytest.fixture
def trace() -> TraceBuilder:
    """A trace with a main frame, a child frame and a named renderer main thread."""

    builder = TraceBuilder()
    builder.tracing_started()
    builder.thread_name()
    return builder
