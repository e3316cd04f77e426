from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Generic, Mapping, Sequence, TypeVar

from .errors import HandlerStateError
from .types import TraceEvent

DataT = TypeVar("DataT")


class HandlerState(str, Enum):
    STREAMING = "streaming"
    FINALIZED = "finalized"
    FAILED = "failed"


class TraceHandler(ABC, Generic[DataT]):
    """Base class for two-phase trace handlers.

    A handler receives every event of a trace through :meth:`handle_event`,
    then runs :meth:`finalize` exactly once, after all handlers named by
    :meth:`deps` have finalized. ``finalize`` receives a read-only mapping from
    dependency name to that dependency's :meth:`data` snapshot.

    Calling ``finalize`` twice, or streaming events into a finalized handler,
    raises :class:`HandlerStateError`; :meth:`reset` is the only way back.
    """

    #: Registry key for this handler. Subclasses should override this constant.
    handler_name: str
    #: Names of the handlers whose finalized data this handler reads.
    dependencies: Sequence[str] = ()

    def __init__(self) -> None:
        self.reset()

    @classmethod
    def deps(cls) -> list[str]:
        return list(cls.dependencies)

    @property
    def state(self) -> HandlerState:
        return self._state

    def reset(self) -> None:
        self._state = HandlerState.STREAMING
        self._reset_state()

    def handle_event(self, event: TraceEvent) -> None:
        if self._state is not HandlerState.STREAMING:
            raise HandlerStateError(
                f"{self.handler_name} cannot accept events while {self._state.value}; call reset() first"
            )
        self._handle_event(event)

    def finalize(self, dependencies: Mapping[str, Any]) -> None:
        if self._state is not HandlerState.STREAMING:
            raise HandlerStateError(
                f"{self.handler_name} cannot be finalized while {self._state.value}; call reset() first"
            )
        missing = [name for name in self.deps() if name not in dependencies]
        if missing:
            raise HandlerStateError(
                f"{self.handler_name} finalized without dependency data for: {', '.join(missing)}"
            )
        try:
            self._finalize(dependencies)
        except Exception:
            self._state = HandlerState.FAILED
            raise
        self._state = HandlerState.FINALIZED

    def data(self) -> DataT:
        if self._state is not HandlerState.FINALIZED:
            raise HandlerStateError(
                f"{self.handler_name} has no data while {self._state.value}"
            )
        return self._data()

    @abstractmethod
    def _reset_state(self) -> None:
        """Clear all accumulated state."""

    @abstractmethod
    def _handle_event(self, event: TraceEvent) -> None:
        """Consume one event during the streaming phase."""

    @abstractmethod
    def _finalize(self, dependencies: Mapping[str, Any]) -> None:
        """Compute the handler's data once every event has been seen."""

    @abstractmethod
    def _data(self) -> DataT:
        """Return a snapshot that callers may keep without aliasing hazards."""


__all__ = ["HandlerState", "TraceHandler"]
