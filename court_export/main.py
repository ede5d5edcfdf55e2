"""Entry point: delegates to CLI app (one module per mode: threads, analyze, generate, export, serve)."""

from rich.traceback import install

from court_export.cli import app
from court_export.utils.tracing import shutdown_tracing

if __name__ == "__main__":
    try:
        install(show_locals=False, max_frames=5, word_wrap=True)
        app()
    finally:
        shutdown_tracing()
