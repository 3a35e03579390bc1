"""Trace batch loader: decodes JSON/YAML payloads into WorkflowTrace records.

A batch is a list of records shaped like::

    {
      "case_id": "case-001",
      "events": [
        {"timestamp": "2024-05-01T10:00:00Z", "action": "session_start"},
        {"timestamp": "2024-05-01T10:00:02Z", "action": "mcp_tool_call",
         "tool_used": "search_orders", "tool_params": {"order_id": "A1"}},
        ...
      ],
      "summary": {"duration_ms": 6000, "tool_count": 2}
    }
"""
from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from flowpath_core.errors import TraceValidationError
from flowpath_core.logging import get_logger

from flowpath_optimizer.types import Event, TraceSummary, WorkflowTrace

logger = get_logger("optimizer.loader")

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_batch(path: Path | str) -> list[WorkflowTrace]:
    """Load and validate a trace batch from a JSON or YAML file.

    Args:
        path: File to read; ``.yaml``/``.yml`` are parsed as YAML,
            anything else as JSON.

    Returns:
        The parsed traces, in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        TraceValidationError: If the file cannot be decoded or the
            payload is not a valid batch.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Trace batch not found: {path}"
        raise FileNotFoundError(msg)

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            msg = f"Invalid YAML in {path}: {exc}"
            raise TraceValidationError(msg) from exc
    else:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON in {path}: {exc}"
            raise TraceValidationError(msg) from exc

    traces = parse_batch(raw)
    logger.info("Loaded %d traces from %s", len(traces), path)
    return traces


def parse_batch(raw: Any) -> list[WorkflowTrace]:
    """Validate a decoded payload and convert it to WorkflowTrace records.

    Raises:
        TraceValidationError: If the payload is not a non-empty list of
            well-formed trace records.
    """
    if not isinstance(raw, list):
        msg = f"Trace batch must be a list, got {type(raw).__name__}"
        raise TraceValidationError(msg)
    if not raw:
        msg = "Trace batch must not be empty"
        raise TraceValidationError(msg)

    return [parse_trace(record, index) for index, record in enumerate(raw)]


def parse_trace(record: Any, index: int = 0) -> WorkflowTrace:
    """Convert one raw trace record, reporting problems by position."""
    if not isinstance(record, dict):
        msg = f"Trace #{index} must be a mapping, got {type(record).__name__}"
        raise TraceValidationError(msg)

    case_id = record.get("case_id")
    if case_id is None or case_id == "":
        msg = f"Trace #{index} missing required field 'case_id'"
        raise TraceValidationError(msg)
    label = f"Trace {case_id!r}"

    events_raw = record.get("events")
    if not isinstance(events_raw, list) or not events_raw:
        msg = f"{label} must have a non-empty 'events' list"
        raise TraceValidationError(msg)

    events = tuple(
        _parse_event(event, f"{label} event #{i}")
        for i, event in enumerate(events_raw)
    )

    return WorkflowTrace(
        case_id=str(case_id),
        events=events,
        summary=_parse_summary(record.get("summary"), label),
    )


# ── Internal Helpers ───────────────────────────────────────────


def _parse_event(raw: Any, label: str) -> Event:
    if not isinstance(raw, dict):
        msg = f"{label} must be a mapping, got {type(raw).__name__}"
        raise TraceValidationError(msg)
    if "timestamp" not in raw:
        msg = f"{label} missing required field 'timestamp'"
        raise TraceValidationError(msg)
    if not raw.get("action"):
        msg = f"{label} missing required field 'action'"
        raise TraceValidationError(msg)

    params = raw.get("tool_params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        msg = f"{label} 'tool_params' must be a mapping, got {type(params).__name__}"
        raise TraceValidationError(msg)

    success = raw.get("success")
    if success is not None and not isinstance(success, bool):
        msg = f"{label} 'success' must be a boolean"
        raise TraceValidationError(msg)

    tool_used = raw.get("tool_used")
    return Event(
        timestamp=parse_timestamp(raw["timestamp"], label),
        action=str(raw["action"]),
        tool_used=str(tool_used) if tool_used is not None else None,
        tool_params=dict(params),
        success=success,
    )


def _parse_summary(raw: Any, label: str) -> TraceSummary:
    if not isinstance(raw, dict) or "duration_ms" not in raw:
        msg = f"{label} missing required field 'summary.duration_ms'"
        raise TraceValidationError(msg)

    duration_ms = raw["duration_ms"]
    if isinstance(duration_ms, bool) or not isinstance(duration_ms, (int, float)):
        msg = f"{label} 'summary.duration_ms' must be a number"
        raise TraceValidationError(msg)

    tool_count = raw.get("tool_count")
    if tool_count is not None and (
        isinstance(tool_count, bool) or not isinstance(tool_count, int)
    ):
        msg = f"{label} 'summary.tool_count' must be an integer"
        raise TraceValidationError(msg)

    return TraceSummary(duration_ms=float(duration_ms), tool_count=tool_count)


def parse_timestamp(value: Any, label: str = "timestamp") -> datetime:
    """Parse an event timestamp into an aware datetime.

    Strings are ISO-8601 (a trailing ``Z`` is accepted); numbers are epoch
    milliseconds. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        msg = f"{label} has invalid timestamp {value!r}"
        raise TraceValidationError(msg)
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000, tz=UTC)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            msg = f"{label} has invalid timestamp {value!r}"
            raise TraceValidationError(msg) from exc
    else:
        msg = f"{label} has invalid timestamp {value!r}"
        raise TraceValidationError(msg)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
