"""Shared CLI helpers: console, logger, export loading, filter options, result writing."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from court_export.agents import AgentCompletionClient, ThreadAnalyzer
from court_export.config import OUTPUT_DIR
from court_export.mail_store import EmailSource, ExportFileError, JsonExportSource
from court_export.models import DateRange, EmailRecord, ThreadQuery
from court_export.utils.logger import get_logger

console = Console()
logger = get_logger("court_export.cli")


def load_emails(input_path: Path) -> list[EmailRecord]:
    """Read an export file; unreadable input prints in red and exits 1."""
    source: EmailSource = JsonExportSource(input_path)
    try:
        return source.list_emails()
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        logger.error("cli.export_missing", path=str(input_path))
        raise typer.Exit(1) from e
    except ExportFileError as e:
        console.print(f"[red]{e}[/red]")
        logger.error("cli.export_invalid", path=str(input_path), error=str(e))
        raise typer.Exit(1) from e


def build_thread_query(
    query: str = "",
    min_messages: int = 1,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    participants: Optional[list[str]] = None,
) -> ThreadQuery:
    date_range = DateRange(from_=from_date, to=to_date) if (from_date or to_date) else None
    return ThreadQuery(
        query=query,
        min_messages=min_messages,
        date_range=date_range,
        participants=participants or [],
    )


def build_analyzer() -> ThreadAnalyzer:
    """Analyzer backed by the registry's thread_analyzer agent."""
    return ThreadAnalyzer(AgentCompletionClient("thread_analyzer"))


def ensure_output_dirs() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    logger.debug("filesystem.ensure_output_dirs", output_dir=str(OUTPUT_DIR))


def write_json_result(result_dict: dict, path: Path) -> Path:
    ensure_output_dirs()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_dict, f, indent=2, default=str)
    logger.info("results.write_json", path=str(path))
    return path


def truncate(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")
