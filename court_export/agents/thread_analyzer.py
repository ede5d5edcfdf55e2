"""Thread analysis: prompt template, response grammar, bounded-concurrency batch runner."""

from __future__ import annotations

import asyncio
import re
from time import perf_counter
from typing import Optional, Sequence

from opentelemetry.trace import Status, StatusCode

from court_export.agents.completion import CompletionClient
from court_export.models.analysis import AnalysisResult
from court_export.models.email import Thread
from court_export.threads.text import render_thread_text
from court_export.utils.logger import get_logger
from court_export.utils.observability import (
    set_span_input_output,
    span_attributes_for_workflow_step,
    thread_preview_for_observability,
)
from court_export.utils.tracing import get_tracer

logger = get_logger("court_export.agents.thread_analyzer")

ANALYSIS_SYSTEM_PROMPT = (
    "You are an email analysis assistant that extracts key information from email conversations."
)

ANALYSIS_PROMPT_TEMPLATE = """
Please analyze the following email thread and extract key information related to this query: "{query}"

{thread_text}

Format your response as follows:
SUMMARY: Provide a brief 1-2 sentence summary of the thread.
TOPICS: List 3-5 main topics discussed in the thread, comma-separated.
RELEVANCE_SCORE: Provide a score from 0-100 indicating how relevant this thread is to the query.
SENTIMENT: Provide a brief assessment of the overall sentiment (positive, negative, neutral).
KEY_INSIGHTS: List 3-5 key insights from this thread related to the query, each on a new line starting with "-".
"""

ERROR_SUMMARY = "Error analyzing this thread."

SECTION_LABELS = ("SUMMARY", "TOPICS", "RELEVANCE_SCORE", "SENTIMENT", "KEY_INSIGHTS")

_LEADING_INT = re.compile(r"[+-]?\d+")
_BULLET = re.compile(r"^-\s*")

DEFAULT_CONCURRENCY = 3


def build_analysis_prompt(thread: Thread, query: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(query=query, thread_text=render_thread_text(thread))


def _section(text: str, label: str, next_label: Optional[str]) -> Optional[str]:
    """Text from `label:` up to `next_label:` or end of string; None when label is absent."""
    terminator = rf"(?:{next_label}:|\Z)" if next_label else r"\Z"
    match = re.search(rf"{label}:(.*?){terminator}", text, re.DOTALL)
    return match.group(1).strip() if match else None


def _parse_relevance(raw: Optional[str]) -> int:
    if not raw:
        return 0
    match = _LEADING_INT.match(raw)
    return int(match.group(0)) if match else 0


def _parse_sentiment(raw: Optional[str]) -> Optional[int]:
    lowered = (raw or "").lower()
    if "positive" in lowered:
        return 1
    if "negative" in lowered:
        return -1
    if "neutral" in lowered:
        return 0
    return None


def parse_analysis_response(text: str, thread: Thread) -> AnalysisResult:
    """Parse the five labeled sections; every missing or malformed section takes its default."""
    sections = {}
    for index, label in enumerate(SECTION_LABELS):
        next_label = SECTION_LABELS[index + 1] if index + 1 < len(SECTION_LABELS) else None
        sections[label] = _section(text or "", label, next_label)

    topics = [t.strip() for t in (sections["TOPICS"] or "").split(",") if t.strip()]
    insights = []
    for line in (sections["KEY_INSIGHTS"] or "").split("\n"):
        cleaned = _BULLET.sub("", line.strip()).strip()
        if cleaned:
            insights.append(cleaned)

    return AnalysisResult(
        thread_id=thread.thread_id,
        subject=thread.subject,
        summary=sections["SUMMARY"] or "",
        topics=topics,
        relevance_score=_parse_relevance(sections["RELEVANCE_SCORE"]),
        sentiment_score=_parse_sentiment(sections["SENTIMENT"]),
        key_insights=insights,
    )


def degraded_result(thread: Thread) -> AnalysisResult:
    return AnalysisResult(
        thread_id=thread.thread_id,
        subject=thread.subject,
        summary=ERROR_SUMMARY,
        topics=[],
        relevance_score=0,
        key_insights=[],
    )


class ThreadAnalyzer:
    """Runs thread analyses against a CompletionClient."""

    def __init__(self, client: CompletionClient):
        self._client = client

    async def analyze_thread(self, thread: Thread, query: str) -> AnalysisResult:
        """Analyze one thread. Completion failures return a degraded result instead of raising."""
        tracer = get_tracer()
        log = logger.bind(thread_id=thread.thread_id)
        prompt = build_analysis_prompt(thread, query)
        with tracer.start_as_current_span(
            "analyze_thread",
            attributes=span_attributes_for_workflow_step(
                "CHAIN",
                input_summary={"thread_id": thread.thread_id, "message_count": thread.message_count},
            ),
        ) as span:
            span.set_attribute("workflow.thread_preview", thread_preview_for_observability(thread))
            start = perf_counter()
            try:
                response = await self._client.complete(ANALYSIS_SYSTEM_PROMPT, prompt)
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                log.warning(
                    "thread_analyzer.completion_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return degraded_result(thread)
            result = parse_analysis_response(response, thread)
            set_span_input_output(
                span,
                output_summary={
                    "relevance_score": result.relevance_score,
                    "topic_count": len(result.topics),
                },
            )
            log.debug(
                "thread_analyzer.analyzed",
                relevance_score=result.relevance_score,
                duration_ms=round((perf_counter() - start) * 1000, 2),
            )
            return result

    async def analyze_threads(
        self,
        threads: Sequence[Thread],
        query: str,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> list[AnalysisResult]:
        """Analyze threads with at most `concurrency` completions in flight.

        A fixed pool of workers drains a queue of threads. Results come back sorted by
        relevance_score, highest first; equal scores keep completion order.
        """
        worker_count = max(1, concurrency)
        queue: asyncio.Queue[Thread] = asyncio.Queue()
        for thread in threads:
            queue.put_nowait(thread)
        results: list[AnalysisResult] = []
        logger.info(
            "thread_analyzer.batch_start",
            thread_count=len(threads),
            concurrency=worker_count,
        )

        async def _worker(worker_id: int) -> None:
            while True:
                try:
                    thread = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                results.append(await self.analyze_thread(thread, query))
                logger.debug(
                    "thread_analyzer.worker_progress",
                    worker_id=worker_id,
                    completed=len(results),
                    total=len(threads),
                )

        await asyncio.gather(*(_worker(i) for i in range(min(worker_count, max(1, len(threads))))))
        results.sort(key=lambda r: r.relevance_score, reverse=True)
        logger.info("thread_analyzer.batch_complete", result_count=len(results))
        return results
