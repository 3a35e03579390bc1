"""Transition graph construction.

The GraphBuilder folds every transition observation in a batch into a
directed graph holding one edge per distinct (source, target) pair,
weighted by the cheapest cost observed for that pair.
"""
from __future__ import annotations

from itertools import groupby
from typing import TYPE_CHECKING

from flowpath_core.logging import get_logger

from flowpath_optimizer.transitions import TransitionExtractor
from flowpath_optimizer.types import Edge, TransitionGraph

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from flowpath_optimizer.types import (
        TransitionObservation,
        WorkflowTrace,
    )

logger = get_logger("optimizer.graph")


def _preference(obs: TransitionObservation) -> tuple[float, str, int]:
    # Cheapest first; ties go to the smallest case id, then batch order
    return (obs.cost, obs.case_id, obs.order)


class GraphBuilder:
    """Builds a best-cost transition graph from a batch of traces.

    Usage::

        builder = GraphBuilder(TransitionExtractor(failure_penalty=3.0))
        graph = builder.build(traces)
        edge = graph.edge("START", "search_orders")
    """

    def __init__(self, extractor: TransitionExtractor | None = None) -> None:
        self._extractor = extractor or TransitionExtractor()

    def build(self, traces: Iterable[WorkflowTrace]) -> TransitionGraph:
        """Extract observations from every trace and collapse them.

        Args:
            traces: The batch of traces

        Returns:
            The collapsed transition graph
        """
        observations = self._extractor.extract_batch(traces)
        return self.build_from_observations(observations)

    def build_from_observations(
        self, observations: Sequence[TransitionObservation]
    ) -> TransitionGraph:
        """Group observations by transition and keep the cheapest of each.

        Args:
            observations: Observations from the whole batch

        Returns:
            A graph with one edge per distinct (source, target) pair;
            edges of each node are ordered by target id
        """
        best = {
            key: min(group, key=_preference)
            for key, group in groupby(
                sorted(observations, key=lambda o: o.key),
                key=lambda o: o.key,
            )
        }

        adjacency = {
            source: tuple(
                Edge(target=obs.target, weight=obs.cost, observation=obs)
                for obs in group
            )
            for source, group in groupby(
                (best[key] for key in sorted(best)),
                key=lambda o: o.source,
            )
        }

        graph = TransitionGraph(
            adjacency=adjacency,
            observation_count=len(observations),
        )
        logger.info(
            "Built transition graph: %d nodes, %d edges from %d observations",
            len(graph.nodes),
            graph.edge_count,
            len(observations),
        )
        return graph
