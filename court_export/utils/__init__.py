"""Utility modules."""

from court_export.utils.logger import bind_context, clear_context, get_logger
from court_export.utils.tracing import get_tracer, init_tracing, shutdown_tracing
from court_export.utils.observability import thread_preview_for_observability

__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "get_tracer",
    "init_tracing",
    "shutdown_tracing",
    "thread_preview_for_observability",
]
