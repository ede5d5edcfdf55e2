"""Tests for thread analysis: prompt, response parsing, degradation, bounded batch runs."""

import asyncio
import os
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from court_export.agents.thread_analyzer import (
    ANALYSIS_SYSTEM_PROMPT,
    ERROR_SUMMARY,
    ThreadAnalyzer,
    build_analysis_prompt,
    parse_analysis_response,
)
from court_export.models import EmailBody, EmailRecord
from court_export.threads import group_by_thread, render_thread_text

FULL_RESPONSE = """SUMMARY: Parties discuss an unpaid invoice.
TOPICS: invoice, payment, , deadline
RELEVANCE_SCORE: 85 - highly relevant
SENTIMENT: Mostly negative, some neutral
KEY_INSIGHTS:
- Invoice 42 is overdue
-   Payment promised by Friday

- 
"""


def _thread(thread_id="t1", subject="Invoice 42"):
    (thread,) = group_by_thread([
        EmailRecord(
            id=f"{thread_id}-m1",
            thread_id=thread_id,
            subject=subject,
            from_="a@example.com",
            to="b@example.com",
            date="2024-01-01T10:00:00Z",
            body=EmailBody(plain="Please pay"),
        )
    ])
    return thread


class FakeClient:
    """In-process completion client: scripted replies keyed by thread subject, tracks concurrency."""

    def __init__(self, replies=None, default="", fail_subjects=(), delay=0.01):
        self.replies = replies or {}
        self.default = default
        self.fail_subjects = set(fail_subjects)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls = []

    async def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            for subject in self.fail_subjects:
                if f"Thread: {subject}\n" in user_prompt:
                    raise RuntimeError("provider unavailable")
            for subject, reply in self.replies.items():
                if f"Thread: {subject}\n" in user_prompt:
                    return reply
            return self.default
        finally:
            self.in_flight -= 1


class TestParseAnalysisResponse(unittest.TestCase):
    def test_full_response(self):
        thread = _thread()
        result = parse_analysis_response(FULL_RESPONSE, thread)
        self.assertEqual(result.thread_id, "t1")
        self.assertEqual(result.subject, "Invoice 42")
        self.assertEqual(result.summary, "Parties discuss an unpaid invoice.")
        self.assertEqual(result.topics, ["invoice", "payment", "deadline"])
        self.assertEqual(result.relevance_score, 85)
        self.assertEqual(result.sentiment_score, -1)
        self.assertEqual(result.key_insights, ["Invoice 42 is overdue", "Payment promised by Friday"])

    def test_missing_sections_take_defaults(self):
        result = parse_analysis_response("Nothing useful here.", _thread())
        self.assertEqual(result.summary, "")
        self.assertEqual(result.topics, [])
        self.assertEqual(result.relevance_score, 0)
        self.assertIsNone(result.sentiment_score)
        self.assertEqual(result.key_insights, [])

    def test_non_numeric_relevance_is_zero(self):
        result = parse_analysis_response("RELEVANCE_SCORE: high\nSENTIMENT: calm", _thread())
        self.assertEqual(result.relevance_score, 0)
        self.assertIsNone(result.sentiment_score)

    def test_sentiment_first_match_wins(self):
        thread = _thread()
        self.assertEqual(parse_analysis_response("SENTIMENT: positive but negative", thread).sentiment_score, 1)
        self.assertEqual(parse_analysis_response("SENTIMENT: Negative / neutral", thread).sentiment_score, -1)
        self.assertEqual(parse_analysis_response("SENTIMENT: NEUTRAL", thread).sentiment_score, 0)

    def test_section_ends_at_next_label(self):
        text = "SUMMARY: Short.\nTOPICS: a, b\nRELEVANCE_SCORE: 12"
        result = parse_analysis_response(text, _thread())
        self.assertEqual(result.summary, "Short.")
        self.assertEqual(result.topics, ["a", "b"])
        self.assertEqual(result.relevance_score, 12)


class TestPrompt(unittest.TestCase):
    def test_prompt_embeds_query_and_thread_text(self):
        thread = _thread()
        prompt = build_analysis_prompt(thread, "unpaid invoices")
        self.assertIn('related to this query: "unpaid invoices"', prompt)
        self.assertIn(render_thread_text(thread), prompt)
        for label in ("SUMMARY:", "TOPICS:", "RELEVANCE_SCORE:", "SENTIMENT:", "KEY_INSIGHTS:"):
            self.assertIn(label, prompt)


class TestThreadAnalyzer(unittest.TestCase):
    def test_analyze_thread_uses_system_prompt(self):
        client = FakeClient(default=FULL_RESPONSE)
        result = asyncio.run(ThreadAnalyzer(client).analyze_thread(_thread(), "invoices"))
        self.assertEqual(result.relevance_score, 85)
        self.assertEqual(client.calls[0][0], ANALYSIS_SYSTEM_PROMPT)

    def test_completion_failure_degrades(self):
        client = FakeClient(fail_subjects=["Invoice 42"])
        result = asyncio.run(ThreadAnalyzer(client).analyze_thread(_thread(), "invoices"))
        self.assertEqual(result.thread_id, "t1")
        self.assertEqual(result.subject, "Invoice 42")
        self.assertEqual(result.summary, ERROR_SUMMARY)
        self.assertEqual(result.topics, [])
        self.assertEqual(result.key_insights, [])
        self.assertEqual(result.relevance_score, 0)
        self.assertIsNone(result.sentiment_score)

    def test_cancellation_propagates(self):
        class CancellingClient:
            async def complete(self, system_prompt, user_prompt):
                raise asyncio.CancelledError()

        with self.assertRaises(asyncio.CancelledError):
            asyncio.run(ThreadAnalyzer(CancellingClient()).analyze_thread(_thread(), "q"))

    def test_batch_bounded_and_sorted(self):
        scores = {"S1": 10, "S2": 90, "S3": 50, "S4": 70, "S5": 30}
        client = FakeClient(replies={s: f"RELEVANCE_SCORE: {v}" for s, v in scores.items()})
        threads = [_thread(f"t{i}", f"S{i}") for i in range(1, 6)]
        results = asyncio.run(ThreadAnalyzer(client).analyze_threads(threads, "q", concurrency=2))
        self.assertEqual([r.relevance_score for r in results], [90, 70, 50, 30, 10])
        self.assertEqual({r.thread_id for r in results}, {"t1", "t2", "t3", "t4", "t5"})
        self.assertLessEqual(client.max_in_flight, 2)
        self.assertEqual(len(client.calls), 5)

    def test_batch_failure_does_not_abort(self):
        client = FakeClient(replies={"A": "RELEVANCE_SCORE: 40"}, fail_subjects=["B"])
        threads = [_thread("ta", "A"), _thread("tb", "B")]
        results = asyncio.run(ThreadAnalyzer(client).analyze_threads(threads, "q", concurrency=3))
        self.assertEqual([r.thread_id for r in results], ["ta", "tb"])
        self.assertEqual(results[1].summary, ERROR_SUMMARY)

    def test_batch_zero_concurrency_runs_serially(self):
        client = FakeClient(default="RELEVANCE_SCORE: 1")
        threads = [_thread(f"t{i}", f"S{i}") for i in range(3)]
        results = asyncio.run(ThreadAnalyzer(client).analyze_threads(threads, "q", concurrency=0))
        self.assertEqual(len(results), 3)
        self.assertEqual(client.max_in_flight, 1)

    def test_batch_empty(self):
        client = FakeClient()
        self.assertEqual(asyncio.run(ThreadAnalyzer(client).analyze_threads([], "q")), [])
        self.assertEqual(client.calls, [])


class TestAgentCompletionClient(unittest.TestCase):
    """The pydantic-ai backed client, driven by TestModel (no network)."""

    def setUp(self):
        os.environ.setdefault("OPENAI_API_KEY", "test-key")

    def test_agent_client_feeds_parser(self):
        from pydantic_ai.models.test import TestModel

        from court_export.agents import AgentCompletionClient

        model = TestModel(custom_output_text="SUMMARY: Routine.\nRELEVANCE_SCORE: 40\nSENTIMENT: neutral")
        analyzer = ThreadAnalyzer(AgentCompletionClient("thread_analyzer", model=model))
        result = asyncio.run(analyzer.analyze_thread(_thread(), "q"))
        self.assertEqual(result.summary, "Routine.")
        self.assertEqual(result.relevance_score, 40)
        self.assertEqual(result.sentiment_score, 0)


if __name__ == "__main__":
    unittest.main()
