"""Thread grouping, filtering and transcript rendering."""

from court_export.threads.grouper import (
    extract_email_addresses,
    group_by_thread,
    parse_email_date,
)
from court_export.threads.filters import apply_thread_query, filter_threads, query_terms
from court_export.threads.text import render_thread_text

__all__ = [
    "extract_email_addresses",
    "group_by_thread",
    "parse_email_date",
    "apply_thread_query",
    "filter_threads",
    "query_terms",
    "render_thread_text",
]
