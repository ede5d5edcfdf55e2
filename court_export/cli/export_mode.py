"""Export mode: re-export the records of an export file as JSON, CSV or EML."""

from pathlib import Path

import typer

from court_export.config import EXPORTS_DIR
from court_export.mail_store import export_emails

from .shared import console, load_emails, logger


def export(
    input_path: Path = typer.Argument(..., help="Export JSON file"),
    export_format: str = typer.Option("json", "--format", "-f", help="json, csv or eml"),
    output_dir: Path = typer.Option(EXPORTS_DIR, "--output-dir", "-o", help="Directory for the export"),
) -> None:
    """Write the records of an export in another format."""
    log = logger.bind(command="export", input=str(input_path), format=export_format)
    log.info("export.start")
    emails = load_emails(input_path)
    try:
        path = export_emails(emails, export_format, output_dir)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        log.warning("export.invalid_format")
        raise typer.Exit(1) from e
    console.print(f"[green]Exported {len(emails)} emails to {path}[/green]")
    log.info("export.complete", path=str(path), email_count=len(emails))
