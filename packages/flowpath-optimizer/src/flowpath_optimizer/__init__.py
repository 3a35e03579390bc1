"""Flowpath Optimizer: cheapest-path discovery over recorded workflow traces.

This package provides tools for:
- Loading and validating batches of workflow execution traces
- Extracting timed transitions between consecutive tool invocations
- Collapsing transitions into a best-cost directed graph
- Solving the shortest START → END path (Dijkstra)
- Comparing every recorded trace against that optimum

Main Components:
    Model:
        - WorkflowTrace / Event / TraceSummary: recorded executions

    Graph:
        - TransitionExtractor: Trace → TransitionObservations
        - GraphBuilder: Observations → TransitionGraph (best cost per pair)

    Solving:
        - ShortestPathSolver: TransitionGraph → PathResult

    Evaluation:
        - ComparisonAnalyzer: per-trace deviation from the optimum
        - OptimizationPipeline: runs the whole chain on one batch
"""
from __future__ import annotations

from flowpath_optimizer.comparison import ComparisonAnalyzer
from flowpath_optimizer.graph import GraphBuilder
from flowpath_optimizer.loader import load_batch, parse_batch
from flowpath_optimizer.pipeline import OptimizationPipeline
from flowpath_optimizer.solver import ShortestPathSolver
from flowpath_optimizer.transitions import TransitionExtractor
from flowpath_optimizer.types import (
    END,
    START,
    AnalysisReport,
    Edge,
    Event,
    ExtractedTrace,
    NegativeDurationPolicy,
    PathResult,
    TraceComparison,
    TraceSummary,
    TransitionGraph,
    TransitionKey,
    TransitionObservation,
    WorkflowTrace,
)

__all__ = [
    "END",
    "START",
    "AnalysisReport",
    "ComparisonAnalyzer",
    "Edge",
    "Event",
    "ExtractedTrace",
    "GraphBuilder",
    "NegativeDurationPolicy",
    "OptimizationPipeline",
    "PathResult",
    "ShortestPathSolver",
    "TraceComparison",
    "TraceSummary",
    "TransitionExtractor",
    "TransitionGraph",
    "TransitionKey",
    "TransitionObservation",
    "WorkflowTrace",
    "load_batch",
    "parse_batch",
]
