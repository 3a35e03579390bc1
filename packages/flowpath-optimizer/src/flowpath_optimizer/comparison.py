"""Per-trace comparison against the optimal path.

Maps each recorded trace to the path it actually took and measures how far
it deviates from the solved optimum: tool count, duration, efficiency, and
time wasted.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from flowpath_core.logging import get_logger

from flowpath_optimizer.types import (
    END,
    START,
    TOOL_CALL_ACTION,
    TraceComparison,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowpath_optimizer.types import PathResult, WorkflowTrace

logger = get_logger("optimizer.comparison")

# Seconds within which a trace's duration counts as matching the optimum
DEFAULT_OPTIMAL_TOLERANCE = 0.1


class ComparisonAnalyzer:
    """Compares recorded traces with the optimal path.

    ``actual_duration`` comes from the trace's precomputed summary, so it
    may differ slightly from the sum of extracted transition costs.

    Usage::

        analyzer = ComparisonAnalyzer(optimal_tolerance=0.1)
        for row in analyzer.compare(traces, optimal):
            if not row.is_optimal:
                print(f"{row.case_id}: {row.efficiency:.0f}% efficient")
    """

    def __init__(
        self,
        *,
        tool_action: str = TOOL_CALL_ACTION,
        optimal_tolerance: float = DEFAULT_OPTIMAL_TOLERANCE,
    ) -> None:
        """Initialize the analyzer.

        Args:
            tool_action: Event action value that marks a tool invocation
            optimal_tolerance: Strict upper bound (seconds) on the gap
                between a trace's duration and the optimal distance
        """
        self._tool_action = tool_action
        self._tolerance = optimal_tolerance

    def compare(
        self, traces: Iterable[WorkflowTrace], optimal: PathResult
    ) -> tuple[TraceComparison, ...]:
        """Compare every trace with the optimum, in batch order.

        Args:
            traces: The analyzed batch
            optimal: The solved optimal path

        Returns:
            One comparison record per trace
        """
        comparisons = tuple(self.compare_trace(t, optimal) for t in traces)
        logger.info(
            "Compared %d traces: %d optimal",
            len(comparisons),
            sum(1 for c in comparisons if c.is_optimal),
        )
        return comparisons

    def compare_trace(
        self, trace: WorkflowTrace, optimal: PathResult
    ) -> TraceComparison:
        """Build the comparison record for a single trace."""
        tools = tuple(
            str(e.tool_used) for e in trace.tool_invocations(self._tool_action)
        )
        actual_path = (START, *tools, END)
        tool_count = len(tools)
        actual_duration = trace.summary.duration_s

        # Strip float noise before the strict comparison
        gap = round(abs(actual_duration - optimal.distance), 9)
        is_optimal = tool_count == optimal.tool_count and gap < self._tolerance

        efficiency = time_wasted = time_wasted_pct = None
        if not is_optimal:
            time_wasted = actual_duration - optimal.distance
            if actual_duration != 0:
                efficiency = optimal.distance / actual_duration * 100
                time_wasted_pct = time_wasted / actual_duration * 100

        return TraceComparison(
            case_id=trace.case_id,
            actual_path=actual_path,
            tool_count=tool_count,
            actual_duration=actual_duration,
            is_optimal=is_optimal,
            efficiency=efficiency,
            time_wasted=time_wasted,
            time_wasted_pct=time_wasted_pct,
            matches_optimal_route=actual_path == optimal.path,
        )
