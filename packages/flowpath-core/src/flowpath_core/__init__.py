"""Flowpath Core: shared config, errors, and logging."""
from __future__ import annotations

from flowpath_core._version import __version__
from flowpath_core.config import (
    AnalysisConfig,
    FlowpathConfig,
    LoggingConfig,
    SearchConfig,
)
from flowpath_core.errors import (
    ActionSearchError,
    ConfigError,
    FlowpathError,
    MalformedTraceError,
    NegativeWeightError,
    NoPathFoundError,
    OptimizationError,
    TraceValidationError,
)
from flowpath_core.logging import configure_logging, get_logger, setup_logging

__all__ = [
    # Errors
    "ActionSearchError",
    # Config
    "AnalysisConfig",
    "ConfigError",
    "FlowpathConfig",
    "FlowpathError",
    "LoggingConfig",
    "MalformedTraceError",
    "NegativeWeightError",
    "NoPathFoundError",
    "OptimizationError",
    "SearchConfig",
    "TraceValidationError",
    # Version
    "__version__",
    # Logging
    "configure_logging",
    "get_logger",
    "setup_logging",
]
