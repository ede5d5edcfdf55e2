"""Generate mode: build the court document for selected threads of an export."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from court_export.config import ANALYSIS_CONCURRENCY, ANALYSIS_QUERY, OPENAI_API_KEY, OUTPUT_DIR
from court_export.pipeline import default_document_path, generate_court_document, write_document
from court_export.utils.logger import bind_context, clear_context

from .shared import build_analyzer, console, load_emails, logger

FORMATS = ("md", "pdf")


def generate(
    input_path: Path = typer.Argument(..., help="Export JSON file"),
    thread: Optional[list[str]] = typer.Option(None, "--thread", "-t", help="Thread ID to include (repeatable; default all)"),
    output_format: str = typer.Option("md", "--format", "-f", help="md or pdf"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Document path (default: output/court-document-<ts>.<fmt>)"),
    analyze: Optional[bool] = typer.Option(
        None,
        "--analyze/--no-analyze",
        help="Add LLM thread analysis (default: on when OPENAI_API_KEY is set)",
    ),
    concurrency: int = typer.Option(ANALYSIS_CONCURRENCY, "--concurrency", "-c", min=1),
) -> None:
    """Assemble the evidence document as Markdown, or HTML handed to the PDF step."""
    log = logger.bind(command="generate", input=str(input_path), format=output_format)
    log.info("generate.start")
    if output_format not in FORMATS:
        console.print(f"[red]Unsupported format {output_format!r}; use md or pdf.[/red]")
        log.warning("generate.invalid_format")
        raise typer.Exit(1)

    emails = load_emails(input_path)
    use_analysis = bool(OPENAI_API_KEY) if analyze is None else analyze
    if use_analysis and not OPENAI_API_KEY:
        console.print("[yellow]OPENAI_API_KEY is not set; analysis sections will show errors.[/yellow]")

    bind_context(command="generate")
    try:
        document = asyncio.run(
            generate_court_document(
                emails,
                selected_thread_ids=thread or None,
                output_format=output_format,
                analyzer=build_analyzer() if use_analysis else None,
                query=ANALYSIS_QUERY,
                concurrency=concurrency,
            )
        )
    finally:
        clear_context()

    if thread and document.thread_count == 0:
        console.print(f"[red]None of the requested threads were found in {input_path}.[/red]")
        log.warning("generate.no_selected_threads", requested=thread)
        raise typer.Exit(1)

    path = write_document(document, output or default_document_path(OUTPUT_DIR, output_format))
    if output_format == "pdf" and path.suffix == ".html":
        console.print("[yellow]No PDF renderer configured; wrote HTML for printing instead.[/yellow]")
    console.print(
        f"[green]Wrote {path}[/green] "
        f"({document.thread_count} threads, {document.email_count} emails)"
    )
    log.info("generate.complete", path=str(path), thread_count=document.thread_count)
