"""Orchestrate the workflows: group -> select/filter -> analyze -> assemble -> render."""

from datetime import datetime
from pathlib import Path
from time import perf_counter
from typing import Iterable, Literal, Optional, Sequence

from opentelemetry.trace import Status, StatusCode

from court_export.agents.thread_analyzer import DEFAULT_CONCURRENCY, ThreadAnalyzer
from court_export.config import ANALYSIS_QUERY
from court_export.documents.assembler import assemble_document
from court_export.documents.pdf import PdfRenderer
from court_export.documents.renderer import render_to_html
from court_export.mail_store.exporters import export_timestamp
from court_export.models.analysis import AnalysisReport, AnalysisResult
from court_export.models.document import CourtDocument
from court_export.models.email import EmailRecord, Thread
from court_export.models.filters import ThreadQuery
from court_export.threads.filters import apply_thread_query
from court_export.threads.grouper import group_by_thread
from court_export.utils.logger import get_logger
from court_export.utils.observability import span_attributes_for_workflow_step
from court_export.utils.tracing import get_tracer

logger = get_logger("court_export.pipeline")

DocumentFormat = Literal["md", "pdf"]


def select_threads(threads: Sequence[Thread], thread_ids: Optional[Iterable[str]]) -> list[Thread]:
    """Threads whose id is selected, in grouped order; None selects everything."""
    if thread_ids is None:
        return list(threads)
    wanted = set(thread_ids)
    return [t for t in threads if t.thread_id in wanted]


async def analyze_for_document(
    threads: Sequence[Thread],
    analyzer: ThreadAnalyzer,
    query: str = ANALYSIS_QUERY,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> dict[str, AnalysisResult]:
    """Analysis map for the assembler. A failed batch yields an empty map (every thread unavailable)."""
    try:
        results = await analyzer.analyze_threads(threads, query, concurrency=concurrency)
    except Exception:
        logger.exception("pipeline.analysis_failed", thread_count=len(threads))
        return {}
    return {r.thread_id: r for r in results}


async def generate_court_document(
    emails: Sequence[EmailRecord],
    selected_thread_ids: Optional[Iterable[str]] = None,
    output_format: DocumentFormat = "md",
    analyzer: Optional[ThreadAnalyzer] = None,
    query: str = ANALYSIS_QUERY,
    concurrency: int = DEFAULT_CONCURRENCY,
    generated_at: Optional[datetime] = None,
) -> CourtDocument:
    """Build the court document for the selected threads of an export.

    With an analyzer, each selected thread gets an analysis section. For pdf the HTML
    for the PDF renderer is attached; for md the Markdown is the artifact.
    """
    tracer = get_tracer()
    start = perf_counter()
    log = logger.bind(output_format=output_format, analysis=analyzer is not None)
    log.info("pipeline.generate.start", email_count=len(emails))

    with tracer.start_as_current_span(
        "generate_court_document",
        attributes=span_attributes_for_workflow_step(
            "CHAIN",
            input_summary={"email_count": len(emails), "format": output_format},
        ),
    ) as root_span:
        try:
            with tracer.start_as_current_span("group_threads"):
                threads = select_threads(group_by_thread(emails), selected_thread_ids)
            root_span.set_attribute("workflow.thread_count", len(threads))

            analysis_results = None
            if analyzer is not None:
                with tracer.start_as_current_span("analyze_threads"):
                    analysis_results = await analyze_for_document(threads, analyzer, query, concurrency)

            with tracer.start_as_current_span("assemble_document"):
                markdown = assemble_document(threads, analysis_results, generated_at=generated_at)
            html = render_to_html(markdown) if output_format == "pdf" else None
        except Exception as e:
            root_span.set_status(Status(StatusCode.ERROR, str(e)))
            root_span.record_exception(e)
            raise

    document = CourtDocument(
        markdown=markdown,
        html=html,
        format=output_format,
        thread_count=len(threads),
        email_count=sum(t.message_count for t in threads),
    )
    log.info(
        "pipeline.document_assembled",
        thread_count=document.thread_count,
        email_count=document.email_count,
        duration_ms=round((perf_counter() - start) * 1000, 2),
    )
    return document


async def search_and_analyze(
    emails: Sequence[EmailRecord],
    thread_query: ThreadQuery,
    analyzer: ThreadAnalyzer,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> AnalysisReport:
    """Group, filter by thread_query, and analyze the matches against its query text."""
    tracer = get_tracer()
    log = logger.bind(query=thread_query.query)
    with tracer.start_as_current_span(
        "search_and_analyze",
        attributes=span_attributes_for_workflow_step("CHAIN", input_summary={"query": thread_query.query}),
    ):
        threads = group_by_thread(emails)
        matched = apply_thread_query(threads, thread_query)
        log.info("pipeline.search.matched", total_threads=len(threads), matched_threads=len(matched))
        results = await analyzer.analyze_threads(matched, thread_query.query, concurrency=concurrency) if matched else []
    return AnalysisReport(
        query=thread_query.query,
        total_threads=len(threads),
        matched_threads=len(matched),
        analysis_results=results,
    )


def default_document_path(output_dir: Path, output_format: DocumentFormat, moment: Optional[datetime] = None) -> Path:
    return output_dir / f"court-document-{export_timestamp(moment)}.{output_format}"


def write_document(
    document: CourtDocument,
    output_path: Path,
    pdf_renderer: Optional[PdfRenderer] = None,
) -> Path:
    """Write the artifact; returns the path actually written.

    The extension is forced to match the format. A pdf request without a renderer,
    or whose renderer fails, falls back to writing the HTML next to the target.
    """
    output_path = output_path.with_suffix(f".{document.format}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    log = logger.bind(path=str(output_path), format=document.format)

    if document.format == "md":
        output_path.write_text(document.markdown, encoding="utf-8")
        log.info("pipeline.document_written")
        return output_path

    html = document.html if document.html is not None else render_to_html(document.markdown)
    html_path = output_path.with_suffix(".html")
    if pdf_renderer is None:
        html_path.write_text(html, encoding="utf-8")
        log.warning("pipeline.pdf_renderer_missing", fallback_path=str(html_path))
        return html_path
    try:
        pdf_bytes = pdf_renderer.render_pdf(html)
    except Exception as e:
        html_path.write_text(html, encoding="utf-8")
        log.exception("pipeline.pdf_render_failed", error=str(e), fallback_path=str(html_path))
        return html_path
    output_path.write_bytes(pdf_bytes)
    log.info("pipeline.document_written", size=len(pdf_bytes))
    return output_path
