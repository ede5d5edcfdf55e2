"""Tests for the plain-text thread transcript used in analysis prompts."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from court_export.models import EmailBody, EmailRecord
from court_export.threads import group_by_thread, render_thread_text


def test_render_thread_text_exact_layout():
    (thread,) = group_by_thread([
        EmailRecord(
            id="m1",
            thread_id="t1",
            subject="Hello",
            from_="A <a@x.com>",
            to="b@y.com",
            date="2024-01-01T10:00:00Z",
            body=EmailBody(plain="  Hi there \n"),
        ),
        EmailRecord(
            id="m2",
            thread_id="t1",
            subject="Re: Hello",
            from_="b@y.com",
            to="a@x.com",
            date="2024-01-02T10:00:00Z",
            body=EmailBody(html="<p>Hi back</p>"),
        ),
        EmailRecord(
            id="m3",
            thread_id="t1",
            subject="Re: Hello",
            from_="a@x.com",
            to="b@y.com",
            date="2024-01-03T10:00:00Z",
        ),
    ])
    expected = (
        "Thread: Hello\n"
        "Participants: a@x.com, b@y.com\n"
        "Date Range: 2024-01-01T10:00:00Z to 2024-01-03T10:00:00Z\n"
        "Message Count: 3\n\n"
        "--- Message 1 ---\n"
        "From: A <a@x.com>\n"
        "Date: 2024-01-01T10:00:00Z\n"
        "Subject: Hello\n\n"
        "Hi there\n\n"
        "--- Message 2 ---\n"
        "From: b@y.com\n"
        "Date: 2024-01-02T10:00:00Z\n"
        "Subject: Re: Hello\n\n"
        "[HTML Content Available]\n\n"
        "--- Message 3 ---\n"
        "From: a@x.com\n"
        "Date: 2024-01-03T10:00:00Z\n"
        "Subject: Re: Hello\n\n"
        "[No Content Available]\n\n"
    )
    assert render_thread_text(thread) == expected


def test_empty_plain_is_not_content():
    """An empty plain part falls through to the placeholders."""
    (thread,) = group_by_thread([
        EmailRecord(id="m1", thread_id="t1", date="2024-01-01T10:00:00Z", body=EmailBody(plain="")),
    ])
    assert "[No Content Available]" in render_thread_text(thread)
