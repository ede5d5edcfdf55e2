"""Court document assembly and rendering."""

from court_export.documents.assembler import (
    ANALYSIS_UNAVAILABLE,
    LEGAL_DISCLAIMER,
    assemble_document,
    format_local_datetime,
)
from court_export.documents.renderer import markdown_to_html, render_to_html
from court_export.documents.pdf import PdfRenderer

__all__ = [
    "ANALYSIS_UNAVAILABLE",
    "LEGAL_DISCLAIMER",
    "assemble_document",
    "format_local_datetime",
    "markdown_to_html",
    "render_to_html",
    "PdfRenderer",
]
