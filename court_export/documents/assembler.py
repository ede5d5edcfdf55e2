"""Assemble the Markdown court document from selected threads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from court_export.models.analysis import AnalysisResult
from court_export.models.email import EmailRecord, Thread
from court_export.threads.grouper import parse_email_date
from court_export.utils.logger import get_logger

logger = get_logger("court_export.documents.assembler")

DOCUMENT_TITLE = "EMAIL EVIDENCE DOCUMENT"
NO_SUBJECT = "(No subject)"
NO_PLAIN_CONTENT = "[No plain text content available]"
ANALYSIS_UNAVAILABLE = "*Analysis unavailable*"

LEGAL_DISCLAIMER = (
    "This document was automatically generated and contains email evidence in a format suitable for "
    "legal proceedings. All timestamps are shown in the local timezone at the time of document generation. "
    "The content of the emails has not been altered from the original sources. "
    "Any analysis provided is generated automatically and should be verified by qualified legal professionals."
)


def format_local_datetime(value: str) -> str:
    """Render a message date as local time, e.g. '3/7/2024, 2:05:09 PM'; raw text if unparseable."""
    parsed = parse_email_date(value)
    if parsed is None:
        return value
    try:
        local = parsed.astimezone()
    except (OverflowError, ValueError):
        return value
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.minute:02d}:{local.second:02d} {meridiem}"


def _format_generated(generated_at: Optional[datetime]) -> str:
    moment = (generated_at or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _header(threads: Sequence[Thread], generated_at: Optional[datetime]) -> list[str]:
    total_emails = sum(t.message_count for t in threads)
    return [
        f"# {DOCUMENT_TITLE}\n\n",
        f"**Generated:** {_format_generated(generated_at)}\n",
        f"**Total Emails: {total_emails}**\n",
        f"**Total Threads: {len(threads)}**\n\n",
    ]


def _analysis_section(analysis: Optional[AnalysisResult]) -> list[str]:
    if analysis is None:
        return ["### THREAD ANALYSIS\n\n", f"{ANALYSIS_UNAVAILABLE}\n\n"]
    lines = [
        "### THREAD ANALYSIS\n\n",
        f"**Summary:** {analysis.summary}\n",
        f"**Key Topics:** {', '.join(analysis.topics)}\n",
        "**Key Insights:**\n",
    ]
    lines.extend(f"- {insight}\n" for insight in analysis.key_insights)
    lines.append("\n")
    return lines


def _message_section(index: int, email: EmailRecord) -> list[str]:
    lines = [
        f"#### MESSAGE {index}\n\n",
        f"**Email ID:** {email.id}\n",
        f"**From:** {email.from_}\n",
        f"**To:** {email.to}\n",
        f"**Date:** {format_local_datetime(email.date)}\n",
        f"**Subject:** {email.subject}\n",
        "\n**Content:**\n\n",
        "```\n",
        email.body.plain or NO_PLAIN_CONTENT,
        "\n```\n\n",
    ]
    if email.attachments:
        lines.append(f"**Attachments ({len(email.attachments)}):**\n")
        lines.extend(f"- {a.filename} ({a.mime_type})\n" for a in email.attachments)
        lines.append("\n")
    lines.append("---\n\n")
    return lines


def _thread_section(
    index: int,
    thread: Thread,
    analysis_results: Optional[Mapping[str, AnalysisResult]],
) -> list[str]:
    lines = [
        f"## THREAD {index}: {thread.subject or NO_SUBJECT}\n\n",
        f"**Thread ID:** {thread.thread_id}\n",
        f"**Date Range:** {format_local_datetime(thread.start_date)} to {format_local_datetime(thread.end_date)}\n",
        f"**Participants:** {', '.join(thread.participants)}\n",
        f"**Message Count:** {thread.message_count}\n\n",
    ]
    if analysis_results is not None:
        lines.extend(_analysis_section(analysis_results.get(thread.thread_id)))
    lines.append("### EMAIL MESSAGES\n\n")
    for j, email in enumerate(thread.messages, 1):
        lines.extend(_message_section(j, email))
    return lines


def assemble_document(
    threads: Sequence[Thread],
    analysis_results: Optional[Mapping[str, AnalysisResult]] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Build the Markdown court document.

    Threads are emitted in the order given. Passing analysis_results (even empty) means
    analysis was requested: threads without an entry get an explicit unavailable marker.
    """
    parts = _header(threads, generated_at)
    for i, thread in enumerate(threads, 1):
        parts.extend(_thread_section(i, thread, analysis_results))
    parts.append("## LEGAL DISCLAIMER\n\n")
    parts.append(f"{LEGAL_DISCLAIMER}\n")
    logger.debug(
        "document_assembler.assembled",
        thread_count=len(threads),
        analysis_requested=analysis_results is not None,
    )
    return "".join(parts)
