"""Per-process renderer threads and their task call trees."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.errors import InternalConsistencyError
from ..core.handler import TraceHandler
from ..core.registry import HandlerRegistry
from ..core.types import METADATA_PHASE, TraceEvent
from .meta import MetaData

THREAD_NAME = "thread_name"
MAIN_THREAD_NAME = "CrRendererMain"
RUN_TASK = "RunTask"


@dataclass(slots=True, frozen=True)
class TreeNode:
    id: int
    event_index: int
    parent_id: Optional[int]
    children: Tuple[int, ...]
    depth: int


@dataclass(slots=True, frozen=True)
class CallTree:
    roots: Tuple[int, ...]
    nodes: Mapping[int, TreeNode]


@dataclass(slots=True, frozen=True)
class RendererThread:
    tid: int
    name: str
    # Sorted by start time; longer events first on ties so parents precede children.
    events: Tuple[TraceEvent, ...]
    tree: Optional[CallTree]


@dataclass(slots=True, frozen=True)
class RendererProcess:
    pid: int
    threads: Mapping[int, RendererThread]

    def main_thread(self) -> Optional[RendererThread]:
        for thread in self.threads.values():
            if thread.name == MAIN_THREAD_NAME:
                return thread
        return None


@dataclass(slots=True, frozen=True)
class RendererData:
    processes: Mapping[int, RendererProcess]


def build_call_tree(events: Sequence[TraceEvent]) -> CallTree:
    """Nest ``events`` (already sorted by start, longest first) into a tree.

    An event is the child of the innermost open event whose interval contains
    its start. Instant events become leaves.
    """

    nodes: Dict[int, dict[str, Any]] = {}
    roots: List[int] = []
    stack: List[int] = []

    for index, event in enumerate(events):
        while stack and events[stack[-1]].end_ts <= event.ts:
            stack.pop()
        # An event that overruns the open parent is not nested in it.
        while stack and events[stack[-1]].end_ts < event.end_ts:
            stack.pop()

        node_id = index
        parent_id = stack[-1] if stack else None
        nodes[node_id] = {
            "event_index": index,
            "parent_id": parent_id,
            "children": [],
            "depth": len(stack),
        }
        if parent_id is None:
            roots.append(node_id)
        else:
            nodes[parent_id]["children"].append(node_id)

        if not event.is_instant and (event.dur or 0) > 0:
            stack.append(node_id)

    frozen = {
        node_id: TreeNode(
            id=node_id,
            event_index=raw["event_index"],
            parent_id=raw["parent_id"],
            children=tuple(raw["children"]),
            depth=raw["depth"],
        )
        for node_id, raw in nodes.items()
    }
    return CallTree(roots=tuple(roots), nodes=MappingProxyType(frozen))


@HandlerRegistry.register("Renderer")
class RendererHandler(TraceHandler[RendererData]):
    handler_name = "Renderer"
    dependencies = ("Meta",)

    def _reset_state(self) -> None:
        self._thread_names: Dict[Tuple[int, int], str] = {}
        self._events: Dict[Tuple[int, int], List[TraceEvent]] = {}
        self._result: Optional[RendererData] = None

    def _handle_event(self, event: TraceEvent) -> None:
        if event.ph == METADATA_PHASE:
            if event.name == THREAD_NAME:
                name = event.args.get("name")
                if isinstance(name, str):
                    self._thread_names[(event.pid, event.tid)] = name
            return
        if event.is_complete or event.is_instant:
            self._events.setdefault((event.pid, event.tid), []).append(event)

    def _finalize(self, dependencies: Mapping[str, Any]) -> None:
        meta: MetaData = dependencies["Meta"]
        renderer_pids = meta.renderer_process_ids()

        threads_by_pid: Dict[int, Dict[int, RendererThread]] = {}
        for (pid, tid), events in self._events.items():
            if pid not in renderer_pids:
                continue
            ordered = tuple(sorted(events, key=lambda event: (event.ts, -(event.dur or 0))))
            threads_by_pid.setdefault(pid, {})[tid] = RendererThread(
                tid=tid,
                name=self._thread_names.get((pid, tid), ""),
                events=ordered,
                tree=build_call_tree(ordered),
            )

        self._result = RendererData(
            processes=MappingProxyType(
                {
                    pid: RendererProcess(pid=pid, threads=MappingProxyType(threads))
                    for pid, threads in threads_by_pid.items()
                }
            )
        )

    def _data(self) -> RendererData:
        if self._result is None:
            raise InternalConsistencyError("Renderer finalized without producing data.")
        return self._result


__all__ = [
    "MAIN_THREAD_NAME",
    "RUN_TASK",
    "CallTree",
    "RendererData",
    "RendererHandler",
    "RendererProcess",
    "RendererThread",
    "TreeNode",
    "build_call_tree",
]
