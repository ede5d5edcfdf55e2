"""Email source backed by a Gmail export JSON file."""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from court_export.models.email import EmailRecord
from court_export.utils.logger import get_logger

logger = get_logger("court_export.mail_store")


class ExportFileError(ValueError):
    """Export file exists but cannot be read as a list of email records."""


def _email_items(data: Any, path: Path) -> list[Any]:
    """Locate the record list: {emails: [...]}, a bare list, or the first list-valued property."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        if isinstance(data.get("emails"), list):
            return data["emails"]
        for key, value in data.items():
            if isinstance(value, list):
                logger.info("mail_store.using_array_property", path=str(path), key=key)
                return value
        raise ExportFileError(
            f"Could not find an array of emails in {path}. Check the file structure."
        )
    raise ExportFileError(
        f"Invalid JSON structure in {path}. Expected an array or an object with an array property."
    )


class JsonExportSource:
    """Reads records from an export written by the Gmail fetch step or by export_emails."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._emails: list[EmailRecord] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[EmailRecord]:
        if not self._path.exists():
            raise FileNotFoundError(f"Export file not found: {self._path}")
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ExportFileError(f"Export file {self._path} is not valid UTF-8 JSON: {e}") from e

        emails: list[EmailRecord] = []
        skipped = 0
        for item in _email_items(data, self._path):
            try:
                emails.append(EmailRecord.model_validate(item))
            except ValidationError as e:
                skipped += 1
                logger.warning(
                    "mail_store.record_invalid",
                    path=str(self._path),
                    record_id=item.get("id") if isinstance(item, dict) else None,
                    error_count=e.error_count(),
                )
        logger.info("mail_store.export_loaded", path=str(self._path), email_count=len(emails), skipped=skipped)
        return emails

    def list_emails(self) -> list[EmailRecord]:
        if self._emails is None:
            self._emails = self._load()
        return list(self._emails)


def resolve_export_path(exports_dir: Path, filename: str) -> Path:
    """Export file for a name with or without .json; rejects names escaping exports_dir."""
    clean = filename if filename.endswith(".json") else f"{filename}.json"
    path = (exports_dir / clean).resolve()
    if path.parent != exports_dir.resolve():
        raise ExportFileError(f"Invalid export filename: {filename!r}")
    return path
