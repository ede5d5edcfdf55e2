"""Serve mode: run the FastAPI app that backs the thread-selection UI."""

import sys
from pathlib import Path

import typer
import uvicorn

from court_export.api import create_app
from court_export.config import API_HOST, API_PORT, EXPORTS_DIR, OPENAI_API_KEY, OUTPUT_DIR

from .shared import build_analyzer, console, logger


def serve(
    host: str = typer.Option(API_HOST, "--host", "-h", help="Bind host"),
    port: int = typer.Option(API_PORT, "--port", "-p", help="Port for the API server"),
    exports_dir: Path = typer.Option(EXPORTS_DIR, "--exports-dir", help="Directory of export JSON files"),
) -> None:
    """Start the HTTP API over the exports directory."""
    log = logger.bind(command="serve", host=host, port=port)
    log.info("serve.start", exports_dir=str(exports_dir))
    analyzer = build_analyzer() if OPENAI_API_KEY else None
    if analyzer is None:
        console.print("[yellow]OPENAI_API_KEY is not set; /api/analyze is disabled and documents have no analysis.[/yellow]")
    app = create_app(exports_dir=exports_dir, analyzer=analyzer, output_dir=OUTPUT_DIR)

    console.print(f"[green]Starting API server on http://{host}:{port}[/green]")
    console.print("[dim]Endpoints: /api/exports, /api/threads/{filename}, /api/preview, /api/generate, /health[/dim]")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info",
            timeout_graceful_shutdown=15,
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
        sys.exit(0)
