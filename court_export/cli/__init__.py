"""CLI commands: one module per mode (threads, analyze, generate, export, serve)."""

from typer import Typer

from court_export.cli import (
    analyze_mode,
    export_mode,
    generate_mode,
    serve_mode,
    threads_mode,
    validate_config as validate_config_module,
)
from court_export.utils.tracing import init_tracing

init_tracing()

app = Typer(help="Gmail thread export and court document generator")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(threads_mode.threads)
    app.command()(analyze_mode.analyze)
    app.command()(generate_mode.generate)
    app.command()(export_mode.export)
    app.command()(serve_mode.serve)
    app.command(name="validate-config")(validate_config_module.validate_config)


register_commands()
