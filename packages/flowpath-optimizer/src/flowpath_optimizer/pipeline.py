"""Optimization pipeline orchestrator.

The OptimizationPipeline coordinates the full analysis of a trace batch:
1. Validate the batch
2. Extract transitions and build the best-cost graph
3. Solve the shortest START → END path
4. Compare every trace against the optimum
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from flowpath_core.errors import TraceValidationError
from flowpath_core.logging import get_logger

from flowpath_optimizer.comparison import ComparisonAnalyzer
from flowpath_optimizer.graph import GraphBuilder
from flowpath_optimizer.solver import ShortestPathSolver
from flowpath_optimizer.transitions import TransitionExtractor
from flowpath_optimizer.types import (
    SENTINELS,
    TOOL_CALL_ACTION,
    AnalysisReport,
    NegativeDurationPolicy,
    WorkflowTrace,
)

if TYPE_CHECKING:
    from flowpath_core.config import AnalysisConfig

logger = get_logger("optimizer.pipeline")


class OptimizationPipeline:
    """Runs graph construction, path solving, and comparison on a batch.

    Each run is independent and stateless, so one pipeline may serve
    several batches, including from different threads.

    Usage::

        pipeline = OptimizationPipeline(failure_penalty=3.0)
        report = pipeline.run(traces)

        print(" → ".join(report.optimal.path))
        for row in report.comparisons:
            print(row.case_id, row.is_optimal)
    """

    def __init__(
        self,
        *,
        tool_action: str = TOOL_CALL_ACTION,
        failure_penalty: float = 3.0,
        optimal_tolerance: float = 0.1,
        negative_durations: NegativeDurationPolicy | str = NegativeDurationPolicy.REJECT,
    ) -> None:
        """Initialize the pipeline.

        Args:
            tool_action: Event action value that marks a tool invocation
            failure_penalty: Cost multiplier after a failed tool call
            optimal_tolerance: Seconds within which a trace counts as optimal
            negative_durations: Policy for out-of-order event timestamps
        """
        self._tool_action = tool_action
        self._extractor = TransitionExtractor(
            tool_action=tool_action,
            failure_penalty=failure_penalty,
            negative_durations=negative_durations,
        )
        self._builder = GraphBuilder(self._extractor)
        self._solver = ShortestPathSolver()
        self._analyzer = ComparisonAnalyzer(
            tool_action=tool_action,
            optimal_tolerance=optimal_tolerance,
        )

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> OptimizationPipeline:
        """Build a pipeline from the ``[analysis]`` config section."""
        config.validate()
        return cls(
            tool_action=config.tool_action,
            failure_penalty=config.failure_penalty,
            optimal_tolerance=config.optimal_tolerance,
            negative_durations=config.negative_durations,
        )

    def run(self, traces: Sequence[WorkflowTrace]) -> AnalysisReport:
        """Analyze a complete batch of traces.

        Args:
            traces: Non-empty batch of workflow traces

        Returns:
            The optimal path, the graph it was solved on, and one
            comparison per trace

        Raises:
            TraceValidationError: If the batch is malformed.
            NoPathFoundError: If no trace connects START to END.
        """
        self.validate(traces)
        logger.info("Analyzing batch of %d traces", len(traces))

        graph = self._builder.build(traces)
        optimal = self._solver.solve(graph)
        comparisons = self._analyzer.compare(traces, optimal)

        report = AnalysisReport(
            optimal=optimal,
            graph=graph,
            comparisons=comparisons,
        )
        logger.info(
            "Analysis complete: %d/%d traces optimal",
            report.optimal_count,
            report.trace_count,
        )
        return report

    def validate(self, traces: Sequence[WorkflowTrace]) -> None:
        """Reject a malformed batch before any graph is built.

        Raises:
            TraceValidationError: On the first problem found.
        """
        if isinstance(traces, (str, bytes)) or not isinstance(traces, Sequence):
            msg = f"Trace batch must be a sequence, got {type(traces).__name__}"
            raise TraceValidationError(msg)
        if not traces:
            msg = "Trace batch must not be empty"
            raise TraceValidationError(msg)

        seen: set[str] = set()
        for index, trace in enumerate(traces):
            if not isinstance(trace, WorkflowTrace):
                msg = (
                    f"Batch item {index} is not a WorkflowTrace "
                    f"({type(trace).__name__})"
                )
                raise TraceValidationError(msg)
            if trace.case_id in seen:
                msg = f"Duplicate case_id {trace.case_id!r} at batch item {index}"
                raise TraceValidationError(msg)
            seen.add(trace.case_id)
            if not trace.events:
                msg = f"Trace {trace.case_id!r} has no events"
                raise TraceValidationError(msg)
            for event in trace.tool_invocations(self._tool_action):
                if not event.tool_used:
                    msg = f"Trace {trace.case_id!r}: tool invocation without tool_used"
                    raise TraceValidationError(msg)
                if event.tool_used in SENTINELS:
                    msg = (
                        f"Trace {trace.case_id!r}: tool id {event.tool_used!r} "
                        "collides with a reserved sentinel node"
                    )
                    raise TraceValidationError(msg)
