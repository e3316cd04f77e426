"""Trace pipeline orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .. import handlers  # noqa: F401  (registers the built-in handlers)
from ..core.errors import HandlerDependencyError
from ..core.handler import TraceHandler
from ..core.registry import HandlerRegistry
from ..core.types import PipelineConfig, TraceEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PipelineResult:
    """Finalized data of every handler that ran, keyed by handler name."""

    order: Tuple[str, ...]
    data: Mapping[str, Any] = field(default_factory=dict)
    event_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def __getitem__(self, name: str) -> Any:
        return self.data[name]


class TracePipeline:
    """Drive a set of handlers over one trace.

    Handlers run in dependency order: every event is streamed to each handler
    in that order, then each handler is finalized with read-only snapshots of
    its dependencies' data. ``run`` resets all handlers first, so a pipeline
    can be reused for another trace, including after a failed run.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self._config = config or PipelineConfig()
        self._order = HandlerRegistry.resolve_order(self._config.handlers)
        self._handlers: Dict[str, TraceHandler[Any]] = {
            name: self._create_handler(name) for name in self._order
        }
        logger.debug("Handler order: %s", " -> ".join(self._order))

    @property
    def order(self) -> Tuple[str, ...]:
        return self._order

    def handler(self, name: str) -> TraceHandler[Any]:
        try:
            return self._handlers[name]
        except KeyError as exc:
            raise KeyError(f"Handler '{name}' is not part of this pipeline") from exc

    def reset(self) -> None:
        for handler in self._handlers.values():
            handler.reset()

    def run(self, events: Iterable[TraceEvent]) -> PipelineResult:
        self.reset()

        handlers = [self._handlers[name] for name in self._order]
        count = 0
        for event in events:
            for handler in handlers:
                handler.handle_event(event)
            count += 1
        logger.debug("Streamed %d trace events", count)

        finalized: Dict[str, Any] = {}
        for name in self._order:
            handler = self._handlers[name]
            snapshot = MappingProxyType({dep: finalized[dep] for dep in handler.deps()})
            logger.debug("Finalizing %s", name)
            handler.finalize(snapshot)
            finalized[name] = handler.data()

        return PipelineResult(order=self._order, data=finalized, event_count=count)

    def _create_handler(self, name: str) -> TraceHandler[Any]:
        try:
            return HandlerRegistry.create(name)
        except KeyError as exc:
            raise HandlerDependencyError(f"Unknown trace handler '{name}'") from exc


__all__ = ["PipelineResult", "TracePipeline"]
