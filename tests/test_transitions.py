"""Tests for TransitionExtractor: invocation filtering, costs, and penalties."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from flowpath_core.errors import MalformedTraceError
from flowpath_optimizer.transitions import TransitionExtractor, duration_seconds
from flowpath_optimizer.types import (
    END,
    START,
    Event,
    NegativeDurationPolicy,
    TraceSummary,
    TransitionKey,
    WorkflowTrace,
)

T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)


class TestEventOutcome:
    def test_empty_params_succeed(self) -> None:
        event = Event(timestamp=T0, action="mcp_tool_call", tool_used="X")
        assert event.succeeded is True

    def test_null_param_fails(self) -> None:
        event = Event(
            timestamp=T0,
            action="mcp_tool_call",
            tool_used="X",
            tool_params={"a": 1, "b": None},
        )
        assert event.succeeded is False

    def test_all_non_null_params_succeed(self) -> None:
        event = Event(
            timestamp=T0,
            action="mcp_tool_call",
            tool_used="X",
            tool_params={"a": 0, "b": "", "c": False},
        )
        assert event.succeeded is True

    def test_explicit_flag_overrides_params(self) -> None:
        failed = Event(
            timestamp=T0, action="mcp_tool_call", tool_used="X", success=False
        )
        recovered = Event(
            timestamp=T0,
            action="mcp_tool_call",
            tool_used="X",
            tool_params={"a": None},
            success=True,
        )
        assert failed.succeeded is False
        assert recovered.succeeded is True


class TestTransitionExtractor:
    def test_duration_seconds(self) -> None:
        assert duration_seconds(T0, T0 + timedelta(milliseconds=1500)) == 1.5

    def test_invocations_are_ordered_subsequence(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 1), ("Y", 2), ("Z", 4)], end=5)
        invocations = TransitionExtractor().invocations(trace)

        assert [e.tool_used for e in invocations] == ["X", "Y", "Z"]
        assert all(e in trace.events for e in invocations)
        assert len(trace.events) == 5  # filtering leaves the trace untouched

    def test_boundary_and_inner_transitions(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2), ("Y", 5)], end=6)
        extracted = TransitionExtractor().extract(trace)

        assert [o.key for o in extracted.observations] == [
            TransitionKey(START, "X"),
            TransitionKey("X", "Y"),
            TransitionKey("Y", END),
        ]
        assert [o.cost for o in extracted.observations] == [2.0, 3.0, 1.0]
        assert extracted.tool_path == ("X", "Y")
        assert all(o.case_id == "c1" for o in extracted.observations)

    def test_failed_call_triples_cost(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2, {"q": None}), ("Y", 5)], end=6)
        inner = TransitionExtractor().extract(trace).observations[1]

        assert inner.raw_duration == 3.0
        assert inner.cost == pytest.approx(9.0)
        assert inner.success is False

    def test_successful_call_keeps_raw_duration(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2, {"q": "x"}), ("Y", 5)], end=6)
        inner = TransitionExtractor().extract(trace).observations[1]

        assert inner.cost == inner.raw_duration == 3.0
        assert inner.success is True

    def test_failed_last_call_does_not_penalize_end(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2), ("Y", 5, {"q": None})], end=6)
        last = TransitionExtractor().extract(trace).observations[-1]

        assert last.key == TransitionKey("Y", END)
        assert last.cost == 1.0
        assert last.success is True

    def test_custom_penalty(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2, {"q": None}), ("Y", 4)], end=4)
        inner = TransitionExtractor(failure_penalty=5.0).extract(trace).observations[1]
        assert inner.cost == pytest.approx(10.0)

    def test_no_invocations_no_observations(self, make_trace) -> None:
        trace = make_trace("empty", [], end=3)
        extracted = TransitionExtractor().extract(trace)

        assert extracted.invocations == ()
        assert extracted.observations == ()

    def test_single_invocation(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 1)], end=4)
        keys = [o.key for o in TransitionExtractor().extract(trace).observations]
        assert keys == [TransitionKey(START, "X"), TransitionKey("X", END)]

    def test_custom_tool_action(self) -> None:
        trace = WorkflowTrace(
            case_id="c1",
            events=(
                Event(timestamp=T0, action="begin"),
                Event(timestamp=T0 + timedelta(seconds=1), action="tool", tool_used="X"),
                Event(
                    timestamp=T0 + timedelta(seconds=2),
                    action="mcp_tool_call",
                    tool_used="ignored",
                ),
                Event(timestamp=T0 + timedelta(seconds=3), action="finish"),
            ),
            summary=TraceSummary(duration_ms=3000),
        )
        extracted = TransitionExtractor(tool_action="tool").extract(trace)
        assert extracted.tool_path == ("X",)
        assert [o.cost for o in extracted.observations] == [1.0, 2.0]

    def test_zero_duration_is_accepted(self, make_trace) -> None:
        trace = make_trace("c1", [("X", 2), ("Y", 2)], end=2)
        costs = [o.cost for o in TransitionExtractor().extract(trace).observations]
        assert costs == [2.0, 0.0, 0.0]

    def test_negative_duration_rejected(self, make_trace) -> None:
        trace = make_trace("skewed", [("X", 5), ("Y", 3)], end=6)
        with pytest.raises(MalformedTraceError, match="skewed"):
            TransitionExtractor().extract(trace)

    def test_negative_duration_clamped(self, make_trace) -> None:
        trace = make_trace("skewed", [("X", 5), ("Y", 3)], end=6)
        extractor = TransitionExtractor(negative_durations=NegativeDurationPolicy.CLAMP)
        inner = extractor.extract(trace).observations[1]
        assert inner.cost == 0.0

    def test_negative_policy_accepts_string(self, make_trace) -> None:
        trace = make_trace("skewed", [("X", 5), ("Y", 3)], end=6)
        extractor = TransitionExtractor(negative_durations="clamp")
        assert extractor.extract(trace).observations[1].raw_duration == 0.0

    def test_extract_batch_orders_observations(self, make_trace) -> None:
        traces = [
            make_trace("a", [("X", 1)], end=2),
            make_trace("empty", [], end=1),
            make_trace("b", [("Y", 1), ("Z", 2)], end=3),
        ]
        observations = TransitionExtractor().extract_batch(traces)

        assert [o.order for o in observations] == list(range(5))
        assert [o.case_id for o in observations] == ["a", "a", "b", "b", "b"]
