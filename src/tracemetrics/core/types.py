from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

INSTANT_PHASES = frozenset({"I", "i", "n"})
COMPLETE_PHASE = "X"
METADATA_PHASE = "M"


def _freeze_mapping(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if mapping is None:
        return MappingProxyType({})
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(slots=True, frozen=True, eq=False)
class TraceEvent:
    """A single Chromium trace event.

    Equality and hashing are by identity: two events with identical fields are
    still distinct occurrences in the trace.
    """

    name: str
    ts: int
    pid: int
    tid: int = 0
    ph: str = ""
    cat: str = ""
    dur: Optional[int] = None
    args: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", _freeze_mapping(self.args))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "TraceEvent":
        dur = raw.get("dur")
        args = raw.get("args")
        return cls(
            name=str(raw.get("name", "")),
            ts=int(raw.get("ts", 0)),
            pid=int(raw.get("pid", 0)),
            tid=int(raw.get("tid", 0)),
            ph=str(raw.get("ph", "")),
            cat=str(raw.get("cat", "")),
            dur=int(dur) if dur is not None else None,
            args=args if isinstance(args, Mapping) else None,
        )

    @property
    def data(self) -> Mapping[str, Any]:
        """The ``args.data`` payload, or an empty mapping."""
        payload = self.args.get("data")
        return payload if isinstance(payload, Mapping) else MappingProxyType({})

    @property
    def is_instant(self) -> bool:
        return self.ph in INSTANT_PHASES

    @property
    def is_complete(self) -> bool:
        return self.ph == COMPLETE_PHASE and self.dur is not None

    @property
    def end_ts(self) -> int:
        return self.ts + (self.dur or 0)


@dataclass(slots=True, frozen=True)
class ProcessWindow:
    """Inclusive ``[min, max]`` microsecond window."""

    min: int
    max: int

    def contains(self, ts: int) -> bool:
        return self.min <= ts <= self.max


@dataclass(slots=True, frozen=True)
class NavigationRecord:
    """One navigation of a frame, as recorded by its ``navigationStart`` event."""

    navigation_id: str
    frame_id: str
    ts: int
    url: str = ""
    pid: int = 0
    event: Optional[TraceEvent] = None


class ScoreClassification(str, Enum):
    GOOD = "good"
    OK = "ok"
    BAD = "bad"
    # DOMContentLoaded and friends have no good/ok/bad rating.
    UNCLASSIFIED = "unclassified"


class MetricName(str, Enum):
    FCP = "FCP"  # First Contentful Paint
    FP = "FP"  # First Paint
    L = "L"  # MarkLoad
    LCP = "LCP"  # Largest Contentful Paint
    DCL = "DCL"  # DOMContentLoaded
    TTI = "TTI"  # Time To Interactive
    TBT = "TBT"  # Total Blocking Time
    CLS = "CLS"  # Cumulative Layout Shift


@dataclass(slots=True, frozen=True)
class MetricScore:
    """Score of one metric for one navigation of one frame."""

    metric_name: MetricName
    score: str
    classification: ScoreClassification
    value: float
    event: Optional[TraceEvent] = None
    # The last navigation that occurred before this metric.
    navigation: Optional[NavigationRecord] = None
    estimated: bool = False


@dataclass(slots=True)
class PipelineConfig:
    """Which handlers a pipeline run should produce data for.

    Dependencies of the requested handlers are added automatically.
    """

    handlers: Sequence[str] = ("PageLoadMetrics",)


__all__ = [
    "COMPLETE_PHASE",
    "INSTANT_PHASES",
    "METADATA_PHASE",
    "MetricName",
    "MetricScore",
    "NavigationRecord",
    "PipelineConfig",
    "ProcessWindow",
    "ScoreClassification",
    "TraceEvent",
]
