"""Plain-text transcript of a thread.

The layout is the thread section of the analysis prompt; change it together with
ANALYSIS_PROMPT_TEMPLATE in court_export.agents.thread_analyzer.
"""

from court_export.models.email import EmailRecord, Thread

HTML_PLACEHOLDER = "[HTML Content Available]"
NO_CONTENT_PLACEHOLDER = "[No Content Available]"


def _message_body(message: EmailRecord) -> str:
    if message.body.plain:
        return message.body.plain.strip()
    if message.body.html:
        return HTML_PLACEHOLDER
    return NO_CONTENT_PLACEHOLDER


def render_thread_text(thread: Thread) -> str:
    parts = [
        f"Thread: {thread.subject}\n",
        f"Participants: {', '.join(thread.participants)}\n",
        f"Date Range: {thread.start_date} to {thread.end_date}\n",
        f"Message Count: {thread.message_count}\n\n",
    ]
    for index, message in enumerate(thread.messages, 1):
        parts.append(f"--- Message {index} ---\n")
        parts.append(f"From: {message.from_}\n")
        parts.append(f"Date: {message.date}\n")
        parts.append(f"Subject: {message.subject}\n\n")
        parts.append(f"{_message_body(message)}\n\n")
    return "".join(parts)
