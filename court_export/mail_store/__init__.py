"""Email sources and exporters."""

from court_export.mail_store.protocol import EmailSource
from court_export.mail_store.json_export import (
    ExportFileError,
    JsonExportSource,
    resolve_export_path,
)
from court_export.mail_store.exporters import build_eml, export_emails, export_timestamp

__all__ = [
    "EmailSource",
    "ExportFileError",
    "JsonExportSource",
    "resolve_export_path",
    "build_eml",
    "export_emails",
    "export_timestamp",
]
