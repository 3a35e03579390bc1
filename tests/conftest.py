from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from flowpath_optimizer.types import Event, TraceSummary, WorkflowTrace

T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)

ToolStep = tuple[str, float] | tuple[str, float, dict[str, Any] | None]


def build_trace(
    case_id: str,
    steps: list[ToolStep],
    *,
    end: float | None = None,
    duration_ms: float | None = None,
    start: float = 0.0,
) -> WorkflowTrace:
    """Build a trace from (tool, seconds-after-T0[, params]) steps.

    The trace opens with a ``session_start`` event at ``start`` and closes
    with a ``session_end`` event at ``end`` (defaults to the last step).
    """
    events = [Event(timestamp=T0 + timedelta(seconds=start), action="session_start")]
    for step in steps:
        tool, offset = step[0], step[1]
        params = step[2] if len(step) > 2 else None
        events.append(Event(
            timestamp=T0 + timedelta(seconds=offset),
            action="mcp_tool_call",
            tool_used=tool,
            tool_params=params or {},
        ))

    if end is None:
        end = steps[-1][1] if steps else start
    events.append(Event(timestamp=T0 + timedelta(seconds=end), action="session_end"))

    if duration_ms is None:
        duration_ms = (end - start) * 1000

    return WorkflowTrace(
        case_id=case_id,
        events=tuple(events),
        summary=TraceSummary(duration_ms=duration_ms, tool_count=len(steps)),
    )


@pytest.fixture
def make_trace():
    return build_trace


@pytest.fixture
def scenario_traces() -> list[WorkflowTrace]:
    """Two traces over X → Y; B's X call fails and B runs long."""
    trace_a = build_trace(
        "trace-a",
        [("X", 2), ("Y", 5)],
        end=6,
        duration_ms=6000,
    )
    trace_b = build_trace(
        "trace-b",
        [("X", 2, {"query": None}), ("Y", 5)],
        end=6,
        duration_ms=12000,
    )
    return [trace_a, trace_b]


@pytest.fixture
def raw_batch() -> list[dict[str, Any]]:
    """The scenario batch as a decoded JSON payload."""
    return [
        {
            "case_id": "trace-a",
            "events": [
                {"timestamp": "2024-05-01T10:00:00Z", "action": "session_start"},
                {
                    "timestamp": "2024-05-01T10:00:02Z",
                    "action": "mcp_tool_call",
                    "tool_used": "X",
                    "tool_params": {"query": "refund"},
                },
                {
                    "timestamp": "2024-05-01T10:00:05Z",
                    "action": "mcp_tool_call",
                    "tool_used": "Y",
                    "tool_params": {},
                },
                {"timestamp": "2024-05-01T10:00:06Z", "action": "session_end"},
            ],
            "summary": {"duration_ms": 6000, "tool_count": 2},
        },
        {
            "case_id": "trace-b",
            "events": [
                {"timestamp": "2024-05-01T11:00:00Z", "action": "session_start"},
                {
                    "timestamp": "2024-05-01T11:00:02Z",
                    "action": "mcp_tool_call",
                    "tool_used": "X",
                    "tool_params": {"query": None},
                },
                {
                    "timestamp": "2024-05-01T11:00:05Z",
                    "action": "mcp_tool_call",
                    "tool_used": "Y",
                },
                {"timestamp": "2024-05-01T11:00:06Z", "action": "session_end"},
            ],
            "summary": {"duration_ms": 12000, "tool_count": 2},
        },
    ]
