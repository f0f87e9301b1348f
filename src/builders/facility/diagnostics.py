"""Structured diagnostics events and sinks for layout compilation.

The layout core never prints. Anything worth reporting (accepted-but-imperfect
geometry, rejected configuration, lifecycle counts) becomes an ``Event``
published to a ``DiagnosticsSink`` carried on the build context.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Iterable, Protocol


class Severity(IntEnum):
    INFO = 0
    WARN = 1
    ERROR = 2
    FATAL = 3


SEVERITY_LABELS: dict[int, str] = {
    int(Severity.INFO): "info",
    int(Severity.WARN): "warn",
    int(Severity.ERROR): "error",
    int(Severity.FATAL): "fatal",
}
VALID_SEVERITIES = frozenset(SEVERITY_LABELS.keys())

VALID_STAGES = frozenset({"resolve", "validate", "layout", "compile"})
VALID_SOURCES = frozenset({"config", "preset", "global", "fallback", "computed"})
VALID_COMPONENTS = frozenset(
    {"resolver", "frame", "structure", "solar", "parking", "site", "compiler"}
)
DEFAULT_STAGE = "layout"
DEFAULT_SOURCE = "computed"
DEFAULT_COMPONENT = "compiler"


def utc_now_iso() -> str:
    """Return UTC timestamp in stable ISO-8601 format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Event:
    """Unified diagnostics event schema."""

    ts: str
    run_id: str
    stage: str
    component: str
    code: str
    severity: int
    path: str
    source: str
    input_value: Any
    resolved_value: Any
    reason: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def severity_label(self) -> str:
        return SEVERITY_LABELS.get(int(self.severity), "info")


def _vocab(value: Any, allowed: frozenset, default: str) -> tuple[str, bool]:
    """Return (canonical value, was_normalized)."""
    candidate = value.strip().lower() if isinstance(value, str) else ""
    if candidate in allowed:
        return candidate, False
    return default, True


def _clamp_severity(severity: Any) -> int:
    try:
        value = int(severity)
    except (TypeError, ValueError):
        return int(Severity.INFO)
    return max(int(Severity.INFO), min(int(Severity.FATAL), value))


def make_event(
    *,
    run_id: str = "",
    stage: str,
    component: str,
    code: str,
    severity: int = 0,
    path: str = "",
    source: str = "",
    input_value: Any = None,
    resolved_value: Any = None,
    reason: str = "",
    meta: dict[str, Any] | None = None,
    ts: str = "",
) -> Event:
    meta_value = dict(meta) if isinstance(meta, dict) else {}

    stage_value, stage_fixed = _vocab(stage, VALID_STAGES, DEFAULT_STAGE)
    component_value, component_fixed = _vocab(component, VALID_COMPONENTS, DEFAULT_COMPONENT)
    source_value, source_fixed = _vocab(source, VALID_SOURCES, DEFAULT_SOURCE)

    # Keep the caller's words so a bad vocabulary is still traceable.
    normalized_from: dict[str, Any] = {}
    if stage_fixed:
        normalized_from["stage"] = stage
    if component_fixed:
        normalized_from["component"] = component
    if source_fixed:
        normalized_from["source"] = source
    if normalized_from:
        previous = meta_value.get("normalized_from")
        if isinstance(previous, dict):
            normalized_from.update(previous)
        meta_value["normalized_from"] = normalized_from
        reason = reason or "normalized diagnostics vocabulary"

    return Event(
        ts=ts or utc_now_iso(),
        run_id=run_id,
        stage=stage_value,
        component=component_value,
        code=code,
        severity=_clamp_severity(severity),
        path=path,
        source=source_value,
        input_value=input_value,
        resolved_value=resolved_value,
        reason=reason,
        meta=meta_value,
    )


def emit_simple(
    sink: DiagnosticsSink,
    *,
    code: str,
    path: str = "",
    payload: Any = None,
    severity: int = Severity.INFO,
    component: str = DEFAULT_COMPONENT,
    stage: str = DEFAULT_STAGE,
    source: str = DEFAULT_SOURCE,
    reason: str = "",
    run_id: str = "",
    input_value: Any = None,
    resolved_value: Any = None,
    meta: dict[str, Any] | None = None,
    **extra_meta: Any,
) -> Event:
    merged_meta = dict(meta) if isinstance(meta, dict) else {}
    merged_meta.update(extra_meta)
    if payload is not None:
        merged_meta.setdefault("payload", payload)
    event = make_event(
        run_id=run_id,
        stage=stage,
        component=component,
        code=code,
        severity=severity,
        path=path,
        source=source,
        input_value=input_value,
        resolved_value=resolved_value,
        reason=reason,
        meta=merged_meta,
    )
    sink.emit(event)
    return event


def rebind_run_id(event: Event, run_id: str) -> Event:
    """Copy an event recorded before a run id existed into a running build."""
    return make_event(
        ts=event.ts,
        run_id=run_id,
        stage=event.stage,
        component=event.component,
        code=event.code,
        severity=event.severity,
        path=event.path,
        source=event.source,
        input_value=event.input_value,
        resolved_value=event.resolved_value,
        reason=event.reason,
        meta=event.meta,
    )


def max_severity(events: Iterable[Event]) -> int:
    return max((int(event.severity) for event in events), default=int(Severity.INFO))


class DiagnosticsSink(Protocol):
    """Sink interface for structured diagnostics events."""

    def emit(self, event: Event) -> None:
        """Publish one diagnostics event."""


class NoopDiagnosticsSink:
    """Default diagnostics sink that drops all events."""

    def emit(self, event: Event) -> None:
        del event


class CollectingDiagnosticsSink:
    """Keep events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)


class JsonlDiagnosticsSink:
    """Append diagnostics events to a JSONL file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def emit(self, event: Event) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(event.to_dict(), ensure_ascii=False, sort_keys=True, default=str)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
