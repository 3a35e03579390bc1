"""Shared data types for the path optimization pipeline.

These types represent the layers of the analysis:
- Trace model: recorded workflow executions and their events
- Transition observations: cost samples between consecutive tool calls
- Transition graph: best-cost edges collapsed across the whole batch
- Path results and per-trace comparisons against the optimum
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from datetime import datetime

# Sentinel nodes bracketing every trace
START = "START"
END = "END"
SENTINELS = frozenset({START, END})

# Action value marking a tool invocation in recorded traces
TOOL_CALL_ACTION = "mcp_tool_call"


class NegativeDurationPolicy(StrEnum):
    """How the extractor treats a transition whose end precedes its start."""

    REJECT = "reject"  # Raise MalformedTraceError
    CLAMP = "clamp"  # Treat as zero elapsed time


# ── Trace Model ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Event:
    """One recorded occurrence within a trace.

    ``success`` is an explicit outcome flag. When it is None the outcome
    is derived from ``tool_params``: any None value marks a failed call,
    an empty mapping counts as success.
    """

    timestamp: datetime
    action: str
    tool_used: str | None = None
    tool_params: dict[str, Any] = field(default_factory=dict)
    success: bool | None = None

    @property
    def succeeded(self) -> bool:
        if self.success is not None:
            return self.success
        return not any(value is None for value in self.tool_params.values())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
        }
        if self.tool_used is not None:
            data["tool_used"] = self.tool_used
            data["tool_params"] = dict(self.tool_params)
        if self.success is not None:
            data["success"] = self.success
        return data


@dataclass(frozen=True, slots=True)
class TraceSummary:
    """Precomputed aggregates shipped with a trace."""

    duration_ms: float
    tool_count: int | None = None

    @property
    def duration_s(self) -> float:
        return self.duration_ms / 1000


@dataclass(frozen=True, slots=True)
class WorkflowTrace:
    """One complete workflow execution.

    Events are ordered by occurrence: the first marks the trace start,
    the last marks the trace end.
    """

    case_id: str
    events: tuple[Event, ...]
    summary: TraceSummary

    def tool_invocations(
        self, tool_action: str = TOOL_CALL_ACTION
    ) -> tuple[Event, ...]:
        """Return the ordered subsequence of tool-invocation events."""
        return tuple(e for e in self.events if e.action == tool_action)

    def to_dict(self) -> dict[str, Any]:
        summary: dict[str, Any] = {"duration_ms": self.summary.duration_ms}
        if self.summary.tool_count is not None:
            summary["tool_count"] = self.summary.tool_count
        return {
            "case_id": self.case_id,
            "events": [e.to_dict() for e in self.events],
            "summary": summary,
        }


# ── Transitions & Graph ────────────────────────────────────────


class TransitionKey(NamedTuple):
    """Directed (source, target) node pair."""

    source: str
    target: str

    def __str__(self) -> str:
        return f"{self.source} → {self.target}"


@dataclass(frozen=True, slots=True)
class TransitionObservation:
    """One observed cost sample for a directed node pair.

    Attributes:
        source: Source node (tool id or START).
        target: Target node (tool id or END).
        cost: Seconds, multiplied by the failure penalty when the source
            invocation failed.
        raw_duration: Unpenalized seconds between the two events.
        success: Outcome of the source invocation.
        case_id: Trace the sample came from.
        order: Position of the sample in batch iteration order.
    """

    source: str
    target: str
    cost: float
    raw_duration: float
    success: bool
    case_id: str
    order: int = 0

    @property
    def key(self) -> TransitionKey:
        return TransitionKey(self.source, self.target)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "cost": self.cost,
            "raw_duration": self.raw_duration,
            "success": self.success,
            "case_id": self.case_id,
        }


@dataclass(frozen=True, slots=True)
class ExtractedTrace:
    """Tool invocations and transition observations derived from one trace."""

    case_id: str
    invocations: tuple[Event, ...]
    observations: tuple[TransitionObservation, ...]

    @property
    def tool_path(self) -> tuple[str, ...]:
        return tuple(str(e.tool_used) for e in self.invocations)


@dataclass(frozen=True, slots=True)
class Edge:
    """Best-cost outgoing edge; ``observation`` is the winning sample."""

    target: str
    weight: float
    observation: TransitionObservation


@dataclass(frozen=True, slots=True)
class TransitionGraph:
    """Immutable adjacency mapping from node to its outgoing edges.

    Holds at most one edge per distinct (source, target) pair.
    """

    adjacency: Mapping[str, tuple[Edge, ...]] = field(default_factory=dict)
    observation_count: int = 0

    def __post_init__(self) -> None:
        # Read-only view over a private copy
        object.__setattr__(self, "adjacency", MappingProxyType(dict(self.adjacency)))

    def edges_from(self, node: str) -> tuple[Edge, ...]:
        return self.adjacency.get(node, ())

    def edge(self, source: str, target: str) -> Edge | None:
        for edge in self.edges_from(source):
            if edge.target == target:
                return edge
        return None

    @property
    def nodes(self) -> frozenset[str]:
        found = set(self.adjacency)
        for edges in self.adjacency.values():
            found.update(edge.target for edge in edges)
        return frozenset(found)

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())

    def iter_edges(self) -> Iterator[tuple[str, Edge]]:
        for source, edges in self.adjacency.items():
            for edge in edges:
                yield source, edge

    def __contains__(self, node: object) -> bool:
        return node in self.nodes


# ── Results ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PathResult:
    """Minimum-cost path from START to END over a transition graph."""

    path: tuple[str, ...]
    distance: float
    edges: tuple[Edge, ...] = ()

    @property
    def tools(self) -> tuple[str, ...]:
        return tuple(node for node in self.path if node not in SENTINELS)

    @property
    def tool_count(self) -> int:
        return len(self.path) - 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": list(self.path),
            "distance": self.distance,
            "tool_count": self.tool_count,
            "edges": [e.observation.to_dict() for e in self.edges],
        }


@dataclass(frozen=True, slots=True)
class TraceComparison:
    """How one recorded trace measures up against the optimal path.

    Attributes:
        case_id: Trace identifier.
        actual_path: START, the trace's tool ids in order, END.
        tool_count: Number of tool invocations in the trace.
        actual_duration: Seconds, taken from the trace summary.
        is_optimal: Same tool count as the optimum and a duration within
            tolerance of the optimal distance.
        efficiency: Optimal distance as a percentage of actual duration;
            None when optimal or when the actual duration is zero.
        time_wasted: Seconds beyond the optimal distance; None when optimal.
        time_wasted_pct: ``time_wasted`` as a percentage of actual duration.
        matches_optimal_route: Whether the tool sequence equals the optimum.
    """

    case_id: str
    actual_path: tuple[str, ...]
    tool_count: int
    actual_duration: float
    is_optimal: bool
    efficiency: float | None = None
    time_wasted: float | None = None
    time_wasted_pct: float | None = None
    matches_optimal_route: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_id": self.case_id,
            "actual_path": list(self.actual_path),
            "tool_count": self.tool_count,
            "actual_duration": self.actual_duration,
            "is_optimal": self.is_optimal,
            "efficiency": self.efficiency,
            "time_wasted": self.time_wasted,
            "time_wasted_pct": self.time_wasted_pct,
            "matches_optimal_route": self.matches_optimal_route,
        }


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Optimal path, the graph it was solved over, and per-trace comparisons."""

    optimal: PathResult
    graph: TransitionGraph
    comparisons: tuple[TraceComparison, ...]

    @property
    def trace_count(self) -> int:
        return len(self.comparisons)

    @property
    def optimal_count(self) -> int:
        return sum(1 for c in self.comparisons if c.is_optimal)

    def to_dict(self) -> dict[str, Any]:
        return {
            "optimal": self.optimal.to_dict(),
            "graph": {
                "nodes": sorted(self.graph.nodes),
                "edge_count": self.graph.edge_count,
                "observation_count": self.graph.observation_count,
            },
            "comparisons": [c.to_dict() for c in self.comparisons],
            "optimal_count": self.optimal_count,
            "trace_count": self.trace_count,
        }
