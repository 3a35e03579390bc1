from __future__ import annotations


class FlowpathError(Exception):
    """Base exception for all flowpath errors."""


# ── Input Errors ─────────────────────────────────────────────────────

class TraceValidationError(FlowpathError):
    """Trace batch is malformed or missing required fields."""


class MalformedTraceError(TraceValidationError):
    """Trace events produce an invalid transition (e.g. negative duration)."""


# ── Optimization Errors ──────────────────────────────────────────────

class OptimizationError(FlowpathError):
    """Base for shortest-path failures."""


class NoPathFoundError(OptimizationError):
    """The end node cannot be reached from the start node."""


class NegativeWeightError(OptimizationError):
    """The transition graph carries a negative edge weight."""


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(FlowpathError):
    """Invalid or missing configuration."""


# ── Search Errors ────────────────────────────────────────────────────

class ActionSearchError(FlowpathError):
    """Action search backend failed or received an invalid query."""
