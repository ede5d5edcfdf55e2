"""Analyze mode: filter threads by a query, analyze matches with the LLM, write a JSON report."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from court_export.config import ANALYSIS_CONCURRENCY, OUTPUT_DIR
from court_export.mail_store import export_timestamp
from court_export.pipeline import search_and_analyze
from court_export.utils.logger import bind_context, clear_context

from .shared import (
    build_analyzer,
    build_thread_query,
    console,
    load_emails,
    logger,
    truncate,
    write_json_result,
)

TOP_RESULTS = 5


def analyze(
    input_path: Path = typer.Argument(..., help="Export JSON file"),
    query: str = typer.Option(..., "--query", "-q", help="What to look for in the threads"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Report path (default: output/analysis-<ts>.json)"),
    min_messages: int = typer.Option(1, "--min-messages", "-m", min=1),
    from_date: Optional[str] = typer.Option(None, "--from"),
    to_date: Optional[str] = typer.Option(None, "--to"),
    participant: Optional[list[str]] = typer.Option(None, "--participant", "-p"),
    concurrency: int = typer.Option(ANALYSIS_CONCURRENCY, "--concurrency", "-c", min=1, help="Analyses in flight"),
) -> None:
    """Search threads and rank the matches by relevance to the query."""
    log = logger.bind(command="analyze", input=str(input_path), query=query)
    log.info("analyze.start")
    emails = load_emails(input_path)
    thread_query = build_thread_query(query, min_messages, from_date, to_date, participant)

    bind_context(command="analyze")
    try:
        report = asyncio.run(search_and_analyze(emails, thread_query, build_analyzer(), concurrency=concurrency))
    finally:
        clear_context()

    if report.matched_threads == 0:
        console.print(f"[yellow]No threads match {query!r} ({report.total_threads} threads searched).[/yellow]")
        log.info("analyze.no_matches", total_threads=report.total_threads)
        return

    path = output or OUTPUT_DIR / f"analysis-{export_timestamp()}.json"
    write_json_result(report.model_dump(by_alias=True), path)
    console.print(f"[green]Wrote {path}[/green]")

    table = Table(title=f"Top {min(TOP_RESULTS, len(report.analysis_results))} of {report.matched_threads} matching threads")
    table.add_column("Relevance", justify="right", style="cyan")
    table.add_column("Subject", style="white")
    table.add_column("Summary", style="dim")
    table.add_column("Topics", style="yellow")
    for result in report.analysis_results[:TOP_RESULTS]:
        table.add_row(
            str(result.relevance_score),
            truncate(result.subject or "(No subject)", 40),
            truncate(result.summary, 80),
            ", ".join(result.topics),
        )
    console.print(table)
    log.info("analyze.complete", matched_threads=report.matched_threads, path=str(path))
