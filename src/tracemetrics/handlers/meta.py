"""Frame, navigation and process bookkeeping shared by the other handlers."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.errors import InternalConsistencyError
from ..core.handler import TraceHandler
from ..core.registry import HandlerRegistry
from ..core.types import METADATA_PHASE, NavigationRecord, ProcessWindow, TraceEvent

TRACING_STARTED_IN_BROWSER = "TracingStartedInBrowser"
FRAME_COMMITTED_IN_BROWSER = "FrameCommittedInBrowser"
NAVIGATION_START = "navigationStart"


@dataclass(slots=True, frozen=True)
class MetaData:
    """Finalized view of the trace's frames, navigations and renderer processes."""

    trace_bounds: ProcessWindow
    main_frame_id: str
    browser_process_id: Optional[int]
    # frame id -> navigation id -> record, ascending by navigation start.
    navigations_by_frame_id: Mapping[str, Mapping[str, NavigationRecord]]
    navigations_by_navigation_id: Mapping[str, NavigationRecord]
    # frame id -> renderer pid -> window during which that process hosted the frame.
    renderer_processes_by_frame: Mapping[str, Mapping[int, ProcessWindow]]
    # frame id -> (navigation start timestamps, records), both ascending.
    _navigation_starts: Mapping[str, Tuple[Tuple[int, ...], Tuple[NavigationRecord, ...]]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        starts = {}
        for frame_id, navigations in self.navigations_by_frame_id.items():
            records = tuple(navigations.values())
            starts[frame_id] = (tuple(record.ts for record in records), records)
        object.__setattr__(self, "_navigation_starts", MappingProxyType(starts))

    def navigation_for_event(self, frame_id: str, ts: int) -> Optional[NavigationRecord]:
        """Return the latest navigation of ``frame_id`` that started at or before ``ts``."""

        entry = self._navigation_starts.get(frame_id)
        if entry is None:
            return None
        timestamps, records = entry
        index = bisect_right(timestamps, ts)
        if index == 0:
            return None
        return records[index - 1]

    def renderer_process_ids(self) -> frozenset[int]:
        return frozenset(
            pid for processes in self.renderer_processes_by_frame.values() for pid in processes
        )


@HandlerRegistry.register("Meta")
class MetaHandler(TraceHandler[MetaData]):
    handler_name = "Meta"
    dependencies = ()

    def _reset_state(self) -> None:
        self._min_ts: Optional[int] = None
        self._max_ts: Optional[int] = None
        self._main_frame_id: Optional[str] = None
        self._fallback_main_frame_id: Optional[str] = None
        self._browser_process_id: Optional[int] = None
        self._commits: Dict[str, List[Tuple[int, int]]] = {}
        self._navigations: List[NavigationRecord] = []
        self._result: Optional[MetaData] = None

    def _handle_event(self, event: TraceEvent) -> None:
        self._update_bounds(event)

        if event.name == TRACING_STARTED_IN_BROWSER:
            self._browser_process_id = event.pid
            for frame in event.data.get("frames") or ():
                frame_id = frame.get("frame")
                if not frame_id:
                    continue
                if self._main_frame_id is None and not frame.get("parent"):
                    self._main_frame_id = frame_id
                process_id = frame.get("processId")
                if process_id is not None:
                    self._commits.setdefault(frame_id, []).append((event.ts, int(process_id)))
            return

        if event.name == FRAME_COMMITTED_IN_BROWSER:
            frame_id = event.data.get("frame")
            process_id = event.data.get("processId")
            if frame_id and process_id is not None:
                self._commits.setdefault(frame_id, []).append((event.ts, int(process_id)))
            return

        if event.name == NAVIGATION_START:
            self._record_navigation(event)

    def _record_navigation(self, event: TraceEvent) -> None:
        frame_id = event.args.get("frame")
        navigation_id = event.data.get("navigationId")
        url = event.data.get("documentLoaderURL") or ""
        if not frame_id or not navigation_id or not url:
            # Navigations without a URL are noise (e.g. the initial about:blank).
            return
        if self._fallback_main_frame_id is None and event.data.get("isLoadingMainFrame"):
            self._fallback_main_frame_id = frame_id
        self._navigations.append(
            NavigationRecord(
                navigation_id=navigation_id,
                frame_id=frame_id,
                ts=event.ts,
                url=url,
                pid=event.pid,
                event=event,
            )
        )

    def _update_bounds(self, event: TraceEvent) -> None:
        if event.ph == METADATA_PHASE or event.ts <= 0:
            return
        if self._min_ts is None or event.ts < self._min_ts:
            self._min_ts = event.ts
        end = event.end_ts
        if self._max_ts is None or end > self._max_ts:
            self._max_ts = end

    def _finalize(self, dependencies: Mapping[str, Any]) -> None:
        bounds = ProcessWindow(min=self._min_ts or 0, max=self._max_ts or 0)

        navigations = sorted(self._navigations, key=lambda record: record.ts)
        by_frame: Dict[str, Dict[str, NavigationRecord]] = {}
        by_id: Dict[str, NavigationRecord] = {}
        for record in navigations:
            by_frame.setdefault(record.frame_id, {})[record.navigation_id] = record
            by_id[record.navigation_id] = record

        processes_by_frame: Dict[str, Dict[int, ProcessWindow]] = {}
        for frame_id, commits in self._commits.items():
            ordered = sorted(commits)
            windows = processes_by_frame.setdefault(frame_id, {})
            for index, (ts, pid) in enumerate(ordered):
                end = ordered[index + 1][0] if index + 1 < len(ordered) else bounds.max
                end = max(end, ts)
                previous = windows.get(pid)
                if previous is not None:
                    windows[pid] = ProcessWindow(min=min(previous.min, ts), max=max(previous.max, end))
                else:
                    windows[pid] = ProcessWindow(min=ts, max=end)

        self._result = MetaData(
            trace_bounds=bounds,
            main_frame_id=self._main_frame_id or self._fallback_main_frame_id or "",
            browser_process_id=self._browser_process_id,
            navigations_by_frame_id=MappingProxyType(
                {frame_id: MappingProxyType(records) for frame_id, records in by_frame.items()}
            ),
            navigations_by_navigation_id=MappingProxyType(by_id),
            renderer_processes_by_frame=MappingProxyType(
                {frame_id: MappingProxyType(windows) for frame_id, windows in processes_by_frame.items()}
            ),
        )

    def _data(self) -> MetaData:
        if self._result is None:
            raise InternalConsistencyError("Meta finalized without producing data.")
        return self._result


__all__ = ["MetaData", "MetaHandler"]
