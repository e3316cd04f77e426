"""Trace file loading helpers."""

from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping

from ..core.types import TraceEvent

logger = logging.getLogger(__name__)


def load_trace_events(path: Path) -> List[TraceEvent]:
    """Load the events of a Chrome trace stored as JSON or gzipped JSON.

    Both the object format (``{"traceEvents": [...]}``) and the array format
    are accepted. Array traces written by a recorder that was stopped early
    often lack the closing bracket; those are accepted too.
    """

    path = Path(path)
    if not path.is_file():
        raise RuntimeError(f"Trace file not found: {path}")

    logger.debug("Loading trace: %s", path)
    payload = _parse(_read_text(path), path)

    if isinstance(payload, Mapping):
        raw_events = payload.get("traceEvents")
        if not isinstance(raw_events, list):
            raise RuntimeError(f"Trace at {path} has no 'traceEvents' array")
    elif isinstance(payload, list):
        raw_events = payload
    else:
        raise RuntimeError(f"Unsupported trace payload in {path}: {type(payload).__name__}")

    events = list(_to_events(raw_events))
    logger.debug("Loaded %d trace events from %s", len(events), path)
    return events


def _read_text(path: Path) -> str:
    try:
        if path.suffix.lower() == ".gz":
            with gzip.open(path, "rt", encoding="utf-8") as handle:
                return handle.read()
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RuntimeError(f"Failed to read trace {path}: {exc}") from exc


def _parse(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        stripped = text.rstrip().rstrip(",")
        if stripped.startswith("[") and not stripped.endswith("]"):
            try:
                return json.loads(stripped + "]")
            except json.JSONDecodeError:
                pass
        raise RuntimeError(f"Failed to parse trace {path}: {exc}") from exc


def _to_events(raw_events: Iterable[Any]) -> Iterable[TraceEvent]:
    for raw in raw_events:
        if not isinstance(raw, Mapping) or "name" not in raw:
            continue
        try:
            yield TraceEvent.from_dict(raw)
        except (TypeError, ValueError):
            logger.debug("Skipping malformed trace event: %r", raw)


__all__ = ["load_trace_events"]
