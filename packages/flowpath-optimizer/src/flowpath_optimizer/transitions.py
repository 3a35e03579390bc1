"""Transition extraction from workflow traces.

The TransitionExtractor filters a trace down to its tool invocations and
turns every consecutive pair (plus the implicit START and END boundaries)
into a TransitionObservation carrying the elapsed time between them.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from flowpath_core.errors import MalformedTraceError
from flowpath_core.logging import get_logger

from flowpath_optimizer.types import (
    END,
    START,
    TOOL_CALL_ACTION,
    ExtractedTrace,
    NegativeDurationPolicy,
    TransitionObservation,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from flowpath_optimizer.types import Event, WorkflowTrace

logger = get_logger("optimizer.transitions")

# Cost multiplier applied after a failed tool call (retry/recovery overhead)
DEFAULT_FAILURE_PENALTY = 3.0


def duration_seconds(start: datetime, end: datetime) -> float:
    """Elapsed seconds from ``start`` to ``end`` (negative if reversed)."""
    return (end - start).total_seconds()


class TransitionExtractor:
    """Derives transition observations from workflow traces.

    Usage::

        extractor = TransitionExtractor(failure_penalty=3.0)
        extracted = extractor.extract(trace)
        observations = extractor.extract_batch(traces)
    """

    def __init__(
        self,
        *,
        tool_action: str = TOOL_CALL_ACTION,
        failure_penalty: float = DEFAULT_FAILURE_PENALTY,
        negative_durations: NegativeDurationPolicy | str = NegativeDurationPolicy.REJECT,
    ) -> None:
        """Initialize the extractor.

        Args:
            tool_action: Event action value that marks a tool invocation
            failure_penalty: Multiplier for transitions leaving a failed call
            negative_durations: Policy for transitions that go back in time
        """
        self._tool_action = tool_action
        self._failure_penalty = failure_penalty
        self._negative = NegativeDurationPolicy(negative_durations)

    @property
    def tool_action(self) -> str:
        return self._tool_action

    def invocations(self, trace: WorkflowTrace) -> tuple[Event, ...]:
        """Return the trace's tool invocations in order."""
        return trace.tool_invocations(self._tool_action)

    def extract(
        self, trace: WorkflowTrace, *, order_offset: int = 0
    ) -> ExtractedTrace:
        """Extract tool invocations and transition observations from a trace.

        Args:
            trace: The trace to analyze
            order_offset: Batch position assigned to the first observation

        Returns:
            The extracted invocations and observations; a trace without
            tool invocations yields no observations
        """
        invocations = self.invocations(trace)
        if not invocations:
            logger.debug(
                "Trace %s has no tool invocations",
                trace.case_id,
                extra={"case_id": trace.case_id},
            )
            return ExtractedTrace(trace.case_id, (), ())

        observations: list[TransitionObservation] = []

        def observe(source: str, target: str, raw: float, success: bool) -> None:
            raw = self._checked(trace.case_id, source, target, raw)
            cost = raw if success else raw * self._failure_penalty
            observations.append(TransitionObservation(
                source=source,
                target=target,
                cost=cost,
                raw_duration=raw,
                success=success,
                case_id=trace.case_id,
                order=order_offset + len(observations),
            ))

        first, last = invocations[0], invocations[-1]
        observe(
            START,
            str(first.tool_used),
            duration_seconds(trace.events[0].timestamp, first.timestamp),
            True,
        )

        for current, nxt in zip(invocations, invocations[1:]):
            observe(
                str(current.tool_used),
                str(nxt.tool_used),
                duration_seconds(current.timestamp, nxt.timestamp),
                current.succeeded,
            )

        observe(
            str(last.tool_used),
            END,
            duration_seconds(last.timestamp, trace.events[-1].timestamp),
            True,
        )

        logger.debug(
            "Trace %s: %d invocations, %d observations",
            trace.case_id,
            len(invocations),
            len(observations),
        )
        return ExtractedTrace(trace.case_id, invocations, tuple(observations))

    def extract_batch(
        self, traces: Iterable[WorkflowTrace]
    ) -> list[TransitionObservation]:
        """Extract observations from every trace, in batch order.

        Args:
            traces: The traces to analyze

        Returns:
            All observations, with ``order`` increasing across the batch
        """
        observations: list[TransitionObservation] = []
        for trace in traces:
            extracted = self.extract(trace, order_offset=len(observations))
            observations.extend(extracted.observations)
        logger.info("Extracted %d transition observations", len(observations))
        return observations

    # ── Internal Methods ───────────────────────────────────────────

    def _checked(
        self, case_id: str, source: str, target: str, raw: float
    ) -> float:
        if raw >= 0:
            return raw
        if self._negative is NegativeDurationPolicy.CLAMP:
            logger.warning(
                "Clamping negative duration %.3fs for %s → %s in trace %s",
                raw,
                source,
                target,
                case_id,
                extra={"case_id": case_id, "transition": f"{source} → {target}"},
            )
            return 0.0
        msg = (
            f"Trace {case_id!r}: transition {source} → {target} has negative "
            f"duration {raw:.3f}s (events out of order?)"
        )
        raise MalformedTraceError(msg)
