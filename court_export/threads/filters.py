"""Filter grouped threads by content, date window, participants and size."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from court_export.models.email import EmailRecord, Thread
from court_export.models.filters import DateRange, ThreadQuery
from court_export.threads.grouper import date_sort_key, parse_email_date
from court_export.utils.logger import get_logger

logger = get_logger("court_export.threads.filters")


def query_terms(query: Optional[str]) -> list[str]:
    """Lower-cased, whitespace-split, non-empty search terms."""
    return [term for term in (query or "").lower().split() if term]


def searchable_text(message: EmailRecord) -> str:
    return f"{message.subject} {message.from_} {message.to} {message.body.plain or ''}".lower()


def _parse_bound(value: Optional[str], name: str) -> Optional[datetime]:
    if not value:
        return None
    parsed = parse_email_date(value)
    if parsed is None:
        logger.warning("thread_filter.unparseable_bound", bound=name, value=value)
    return parsed


def _matches_participants(thread: Thread, participants: Sequence[str]) -> bool:
    wanted = [p.lower() for p in participants]
    return any(w in tp.lower() for w in wanted for tp in thread.participants)


def _matches_terms(thread: Thread, terms: Sequence[str]) -> bool:
    # All terms must occur in the same message
    for message in thread.messages:
        text = searchable_text(message)
        if all(term in text for term in terms):
            return True
    return False


def filter_threads(
    threads: Sequence[Thread],
    query: str = "",
    min_messages: int = 1,
    date_range: Optional[DateRange] = None,
    participants: Optional[Sequence[str]] = None,
) -> list[Thread]:
    """Keep threads satisfying every given criterion; input order is preserved."""
    terms = query_terms(query)
    window_start = _parse_bound(date_range.from_, "from") if date_range else None
    window_end = _parse_bound(date_range.to, "to") if date_range else None

    kept: list[Thread] = []
    for thread in threads:
        if thread.message_count < min_messages:
            continue
        if window_start is not None and date_sort_key(thread.end_date) < window_start:
            continue
        if window_end is not None and date_sort_key(thread.start_date) > window_end:
            continue
        if participants and not _matches_participants(thread, participants):
            continue
        if terms and not _matches_terms(thread, terms):
            continue
        kept.append(thread)

    logger.debug(
        "thread_filter.applied",
        input_count=len(threads),
        kept_count=len(kept),
        term_count=len(terms),
    )
    return kept


def apply_thread_query(threads: Sequence[Thread], thread_query: ThreadQuery) -> list[Thread]:
    """filter_threads driven by a ThreadQuery (CLI and API entry point)."""
    return filter_threads(
        threads,
        thread_query.query,
        thread_query.min_messages,
        thread_query.date_range,
        thread_query.participants,
    )
