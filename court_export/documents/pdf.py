"""HTML to PDF boundary (headless-browser print or any other engine)."""

from typing import Protocol


class PdfRenderer(Protocol):
    """Turns the rendered HTML document into PDF bytes."""

    def render_pdf(self, html: str) -> bytes:
        """Print html to an A4 PDF; raises on engine failure."""
        ...
