"""Single-source shortest path over a transition graph.

Classic Dijkstra with a binary-heap frontier. Edge weights must be
non-negative; the solver refuses to search a graph that violates this.
"""
from __future__ import annotations

import heapq
import math
from typing import TYPE_CHECKING

from flowpath_core.errors import NegativeWeightError, NoPathFoundError
from flowpath_core.logging import get_logger

from flowpath_optimizer.types import END, START, PathResult

if TYPE_CHECKING:
    from flowpath_optimizer.types import Edge, TransitionGraph

logger = get_logger("optimizer.solver")


class ShortestPathSolver:
    """Finds the minimum-total-weight path between two graph nodes.

    Usage::

        solver = ShortestPathSolver()
        result = solver.solve(graph)  # START → END
        print(" → ".join(result.path), result.distance)
    """

    def solve(
        self,
        graph: TransitionGraph,
        start: str = START,
        end: str = END,
    ) -> PathResult:
        """Compute the cheapest path from ``start`` to ``end``.

        Args:
            graph: The collapsed transition graph
            start: Source node
            end: Goal node

        Returns:
            The path (start and end inclusive) and its total weight

        Raises:
            NegativeWeightError: If any edge carries a negative weight.
            NoPathFoundError: If ``end`` is unreachable from ``start``.
        """
        self._check_weights(graph)

        distances: dict[str, float] = {start: 0.0}
        previous: dict[str, tuple[str, Edge]] = {}
        visited: set[str] = set()
        # (distance, node): equal distances pop in node-id order
        frontier: list[tuple[float, str]] = [(0.0, start)]

        while frontier:
            current_dist, current = heapq.heappop(frontier)
            if current in visited:
                continue
            visited.add(current)
            logger.debug(
                "Settled %s at %.3fs",
                current,
                current_dist,
                extra={"node": current},
            )
            if current == end:
                break

            for edge in graph.edges_from(current):
                candidate = current_dist + edge.weight
                if candidate < distances.get(edge.target, math.inf):
                    distances[edge.target] = candidate
                    previous[edge.target] = (current, edge)
                    heapq.heappush(frontier, (candidate, edge.target))

        if end not in visited:
            msg = (
                f"No path found from {start} to {end} "
                f"({len(visited)} node(s) reachable)"
            )
            raise NoPathFoundError(msg)

        result = self._reconstruct(previous, start, end, distances[end])
        logger.info(
            "Optimal path: %s (%.3fs)", " → ".join(result.path), result.distance
        )
        return result

    # ── Internal Methods ───────────────────────────────────────────

    def _check_weights(self, graph: TransitionGraph) -> None:
        for source, edge in graph.iter_edges():
            if edge.weight < 0:
                msg = (
                    f"Edge {source} → {edge.target} has negative weight "
                    f"{edge.weight}; shortest path requires non-negative costs"
                )
                raise NegativeWeightError(msg)

    def _reconstruct(
        self,
        previous: dict[str, tuple[str, Edge]],
        start: str,
        end: str,
        distance: float,
    ) -> PathResult:
        """Walk predecessor links back from ``end`` and reverse them."""
        path = [end]
        edges: list[Edge] = []
        node = end
        while node != start:
            node, edge = previous[node]
            path.append(node)
            edges.append(edge)

        path.reverse()
        edges.reverse()
        return PathResult(path=tuple(path), distance=distance, edges=tuple(edges))
