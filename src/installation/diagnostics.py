"""Structured diagnostics for installation passes.

Library modules never print or log free text; every notable decision is an
``Event`` pushed into a sink chosen by the host (no-op by default, in-memory
for tests, JSONL for tool runs).
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Iterable, Protocol


class Severity(IntEnum):
    INFO = 0
    WARN = 1
    ERROR = 2
    FATAL = 3

    @classmethod
    def parse(cls, value: Any, default: "Severity | None" = None) -> "Severity":
        """Accept an int, an enum member or a case-insensitive label."""
        fallback = cls.INFO if default is None else default
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), fallback)
        try:
            return cls(max(int(cls.INFO), min(int(cls.FATAL), int(value))))
        except (TypeError, ValueError):
            return fallback


SEVERITY_LABELS: dict[int, str] = {int(level): level.name.lower() for level in Severity}
VALID_SEVERITIES = frozenset(SEVERITY_LABELS)

# Pass stages, listed in pipeline order.
VALID_STAGES = frozenset({"resolve", "layout", "generate", "hang", "report"})
VALID_SOURCES = frozenset({"config", "preset", "global", "fallback", "computed"})
VALID_COMPONENTS = frozenset(
    {
        "resolver",
        "catalog",
        "layout",
        "shape_manager",
        "footprint",
        "snapping",
        "generator",
        "surface",
        "hangers",
        "report",
        "system",
    }
)
DEFAULT_STAGE = "generate"
DEFAULT_SOURCE = "computed"
DEFAULT_COMPONENT = "system"


def utc_now_iso() -> str:
    """Return UTC timestamp in stable ISO-8601 format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Event:
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

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Event":
        """Rebuild an event from ``to_dict`` output; vocabulary is re-normalized."""
        known = {item.name for item in fields(cls)}
        values = {key: payload.get(key) for key in known if key in payload}
        return make_event(
            ts=str(values.get("ts") or ""),
            run_id=str(values.get("run_id") or ""),
            stage=values.get("stage", DEFAULT_STAGE),
            component=values.get("component", DEFAULT_COMPONENT),
            code=str(values.get("code") or ""),
            severity=values.get("severity", Severity.INFO),
            path=str(values.get("path") or ""),
            source=values.get("source", DEFAULT_SOURCE),
            input_value=values.get("input_value"),
            resolved_value=values.get("resolved_value"),
            reason=str(values.get("reason") or ""),
            meta=values.get("meta"),
        )

    @property
    def severity_label(self) -> str:
        return SEVERITY_LABELS.get(int(self.severity), "info")


def _vocab(value: Any, allowed: frozenset[str]) -> str | None:
    """Canonical vocabulary word, or None when ``value`` needs the default."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    return candidate if candidate in allowed else None


def make_event(
    *,
    run_id: str = "",
    stage: str,
    component: str,
    code: str,
    severity: int = Severity.INFO,
    path: str = "",
    source: str = "",
    input_value: Any = None,
    resolved_value: Any = None,
    reason: str = "",
    meta: dict[str, Any] | None = None,
    ts: str = "",
) -> Event:
    """Build an event, folding unknown stage/component/source into defaults.

    The rejected spellings are kept under ``meta["normalized_from"]`` so a
    reader can still see what the caller asked for.
    """
    meta_value = dict(meta) if isinstance(meta, dict) else {}
    resolved_vocab: dict[str, str] = {}
    rejected: dict[str, Any] = {}
    for name, raw, allowed, default in (
        ("stage", stage, VALID_STAGES, DEFAULT_STAGE),
        ("component", component, VALID_COMPONENTS, DEFAULT_COMPONENT),
        ("source", source, VALID_SOURCES, DEFAULT_SOURCE),
    ):
        word = _vocab(raw, allowed)
        resolved_vocab[name] = word or default
        if word is None and raw not in ("", None):
            rejected[name] = raw

    if rejected:
        previous = meta_value.get("normalized_from")
        if isinstance(previous, dict):
            rejected.update(previous)
        meta_value["normalized_from"] = rejected
        reason = reason or "normalized diagnostics vocabulary"

    return Event(
        ts=ts or utc_now_iso(),
        run_id=run_id,
        stage=resolved_vocab["stage"],
        component=resolved_vocab["component"],
        code=code,
        severity=int(Severity.parse(severity)),
        path=path,
        source=resolved_vocab["source"],
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
    iter_index: int | None = None,
    source: str = DEFAULT_SOURCE,
    reason: str = "",
    run_id: str = "",
    input_value: Any = None,
    resolved_value: Any = None,
    meta: dict[str, Any] | None = None,
    ts: str = "",
    **extra_meta: Any,
) -> Event:
    """Build one event and push it into ``sink``; extra kwargs land in ``meta``."""
    merged_meta = dict(meta) if isinstance(meta, dict) else {}
    merged_meta.update(extra_meta)
    if payload is not None:
        merged_meta.setdefault("payload", payload)
    if iter_index is not None:
        merged_meta["iter_index"] = int(iter_index)
    event = make_event(
        ts=ts,
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


def reemit(sink: DiagnosticsSink, event: Event, *, run_id: str) -> Event:
    """Forward a buffered event (e.g. a resolver warning) under ``run_id``."""
    forwarded = replace(event, run_id=run_id, meta=dict(event.meta))
    sink.emit(forwarded)
    return forwarded


def count_by_code(events: Iterable[Event], min_severity: int = Severity.INFO) -> dict[str, int]:
    """Event counts per code at or above ``min_severity``, sorted by code."""
    counts = Counter(event.code for event in events if int(event.severity) >= int(min_severity))
    return dict(sorted(counts.items()))


class DiagnosticsSink(Protocol):
    def emit(self, event: Event) -> None:
        """Publish one diagnostics event."""


class NoopDiagnosticsSink:
    """Default sink: drops everything."""

    def emit(self, event: Event) -> None:
        del event


class ListDiagnosticsSink:
    """Keep events in memory; handy for hosts that inspect a single pass."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def codes(self) -> list[str]:
        return [event.code for event in self.events]


class FilteringDiagnosticsSink:
    """Forward only events at or above ``min_severity`` to ``inner``."""

    def __init__(self, inner: DiagnosticsSink, min_severity: int = Severity.WARN) -> None:
        self.inner = inner
        self.min_severity = Severity.parse(min_severity)

    def emit(self, event: Event) -> None:
        if int(event.severity) >= int(self.min_severity):
            self.inner.emit(event)


class JsonlDiagnosticsSink:
    """Append one JSON object per event to ``path``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, event: Event) -> None:
        if not event.ts:
            event = replace(event, ts=utc_now_iso())
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(event.to_dict(), ensure_ascii=False, sort_keys=True, default=str)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")


def read_jsonl(path: str | Path) -> list[Event]:
    """Load events written by ``JsonlDiagnosticsSink``; blank lines are skipped."""
    events: list[Event] = []
    with Path(path).open("r", encoding="utf-8") as handle:
        for line in handle:
            if line.strip():
                events.append(Event.from_dict(json.loads(line)))
    return events
