from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from flowpath_core.config import LoggingConfig

_ROOT = "flowpath"

# Record attributes copied into JSON output when callers pass them via ``extra``
_CONTEXT_FIELDS = ("case_id", "transition", "node")


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": record.created,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = str(value)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the root flowpath logger.

    Idempotent: a logger that already has a handler is returned as-is,
    only its level is updated.
    """
    logger = logging.getLogger(_ROOT)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_output:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    logger.addHandler(handler)
    return logger


def configure_logging(config: LoggingConfig, stream: TextIO | None = None) -> logging.Logger:
    """Apply the ``[logging]`` section of a loaded config."""
    return setup_logging(config.level, json_output=config.json, stream=stream)


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the flowpath namespace."""
    return logging.getLogger(f"{_ROOT}.{name}")
