"""
Observability Module
====================

Structured logging and Prometheus metrics for evaluation runs.
"""

from observability.logging_config import bind_context, clear_context, get_logger, setup_logging
from observability.metrics import setup_metrics, track_item_metrics, write_metrics

__all__ = [
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "setup_metrics",
    "track_item_metrics",
    "write_metrics",
]
