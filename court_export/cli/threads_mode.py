"""Threads mode: group an export into threads and list them, optionally filtered."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from court_export.threads import apply_thread_query, group_by_thread

from .shared import build_thread_query, console, load_emails, logger, truncate


def threads(
    input_path: Path = typer.Argument(..., help="Export JSON file"),
    query: str = typer.Option("", "--query", "-q", help="Terms that must all appear in one message"),
    min_messages: int = typer.Option(1, "--min-messages", "-m", min=1, help="Minimum messages per thread"),
    from_date: Optional[str] = typer.Option(None, "--from", help="Keep threads ending on/after this date"),
    to_date: Optional[str] = typer.Option(None, "--to", help="Keep threads starting on/before this date"),
    participant: Optional[list[str]] = typer.Option(None, "--participant", "-p", help="Participant substring (repeatable)"),
) -> None:
    """List the threads of an export, newest activity first."""
    log = logger.bind(command="threads", input=str(input_path))
    log.info("threads.start")
    emails = load_emails(input_path)
    grouped = group_by_thread(emails)
    thread_query = build_thread_query(query, min_messages, from_date, to_date, participant)
    matched = apply_thread_query(grouped, thread_query)
    if not matched:
        console.print("[yellow]No threads match the given filters.[/yellow]")
        log.info("threads.no_matches", total_threads=len(grouped))
        return

    table = Table(title=f"Threads ({len(matched)} of {len(grouped)})")
    table.add_column("#", style="cyan")
    table.add_column("Thread ID", style="green")
    table.add_column("Subject", style="white")
    table.add_column("Participants", style="yellow")
    table.add_column("Messages", justify="right")
    table.add_column("Last message", style="dim")
    for i, t in enumerate(matched, 1):
        table.add_row(
            str(i),
            t.thread_id,
            truncate(t.subject or "(No subject)", 50),
            truncate(", ".join(t.participants), 60),
            str(t.message_count),
            t.end_date,
        )
    console.print(table)
    log.info("threads.complete", total_threads=len(grouped), matched_threads=len(matched))
