"""Group exported emails into conversation threads."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional

from court_export.models.email import EmailRecord, Thread
from court_export.utils.logger import get_logger

logger = get_logger("court_export.threads.grouper")

_EMAIL_ADDRESS = re.compile(r"[\w.-]+@[\w.-]+\.\w+")

# Sort key for dates that fail to parse: earlier than any real message.
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_email_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 or RFC-2822 timestamp; None when neither applies.

    Naive values are taken as UTC so every parsed date is comparable.
    """
    if not value or not value.strip():
        return None
    s = value.strip()
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(s)
        except (TypeError, ValueError, IndexError):
            parsed = None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def date_sort_key(value: Optional[str]) -> datetime:
    """Parsed date, or EARLIEST when unparseable."""
    parsed = parse_email_date(value)
    return parsed if parsed is not None else EARLIEST


def extract_email_addresses(value: Optional[str]) -> list[str]:
    """Return every address found in a free-form header value, left to right."""
    if not value:
        return []
    return _EMAIL_ADDRESS.findall(value)


def _build_thread(thread_id: str, messages: list[EmailRecord]) -> Thread:
    participants: dict[str, None] = {}
    for message in messages:
        for address in extract_email_addresses(message.from_):
            participants.setdefault(address, None)
        for address in extract_email_addresses(message.to):
            participants.setdefault(address, None)
    return Thread(
        thread_id=thread_id,
        subject=messages[0].subject,
        participants=list(participants),
        start_date=messages[0].date,
        end_date=messages[-1].date,
        message_count=len(messages),
        messages=messages,
    )


def group_by_thread(emails: Iterable[EmailRecord]) -> list[Thread]:
    """Group emails by thread_id; threads newest-activity first, messages oldest first.

    Every input record lands in exactly one thread. Both sorts are stable, so equal
    dates keep encounter order.
    """
    records = list(emails)
    # thread_id -> indexes into records, in encounter order
    by_thread: dict[str, list[int]] = {}
    for index, email in enumerate(records):
        by_thread.setdefault(email.thread_id, []).append(index)

    threads: list[Thread] = []
    for thread_id, indexes in by_thread.items():
        messages = sorted((records[i] for i in indexes), key=lambda m: date_sort_key(m.date))
        threads.append(_build_thread(thread_id, messages))

    threads.sort(key=lambda t: date_sort_key(t.end_date), reverse=True)
    logger.debug("thread_grouper.grouped", email_count=len(records), thread_count=len(threads))
    return threads
