"""Write email records as JSON, CSV or simplified EML files."""

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional, Sequence

from court_export.models.email import EmailRecord
from court_export.utils.logger import get_logger

logger = get_logger("court_export.mail_store.exporters")

ExportFormat = Literal["json", "csv", "eml"]

CSV_COLUMNS = (
    ("id", "ID"),
    ("thread_id", "Thread ID"),
    ("subject", "Subject"),
    ("from", "From"),
    ("to", "To"),
    ("date", "Date"),
    ("plain_body", "Plain Body"),
    ("attachment_count", "Attachment Count"),
)

EML_BOUNDARY = "boundary-string"


def export_timestamp(moment: Optional[datetime] = None) -> str:
    """Filesystem-safe ISO timestamp, e.g. 2024-03-07T14-05-09-123Z."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def export_to_json(emails: Sequence[EmailRecord], export_dir: Path, timestamp: str) -> Path:
    path = export_dir / f"emails-{timestamp}.json"
    payload = {
        "count": len(emails),
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "emails": [e.model_dump(by_alias=True, exclude_none=True) for e in emails],
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return path


def export_to_csv(emails: Sequence[EmailRecord], export_dir: Path, timestamp: str) -> Path:
    path = export_dir / f"emails-{timestamp}.csv"
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=[title for _, title in CSV_COLUMNS])
        writer.writeheader()
        for email in emails:
            row = {
                "id": email.id,
                "thread_id": email.thread_id,
                "subject": email.subject,
                "from": email.from_,
                "to": email.to,
                "date": email.date,
                "plain_body": email.body.plain or "",
                "attachment_count": len(email.attachments),
            }
            writer.writerow({title: row[key] for key, title in CSV_COLUMNS})
    return path


def build_eml(email: EmailRecord) -> str:
    """Simplified multipart/alternative message; CRLF line endings."""
    lines = [
        f"From: {email.from_}",
        f"To: {email.to}",
        f"Subject: {email.subject}",
        f"Date: {email.date}",
        f"Message-ID: <{email.id}@gmail.com>",
        f"Thread-ID: <{email.thread_id}@gmail.com>",
        "MIME-Version: 1.0",
        f'Content-Type: multipart/alternative; boundary="{EML_BOUNDARY}"',
        "",
        f"--{EML_BOUNDARY}",
        'Content-Type: text/plain; charset="UTF-8"',
        "",
        email.body.plain or "",
        "",
    ]
    if email.body.html:
        lines.extend([
            f"--{EML_BOUNDARY}",
            'Content-Type: text/html; charset="UTF-8"',
            "",
            email.body.html,
            "",
        ])
    lines.append(f"--{EML_BOUNDARY}--")
    return "\r\n".join(lines)


def export_to_eml(emails: Sequence[EmailRecord], export_dir: Path, timestamp: str) -> Path:
    eml_dir = export_dir / f"eml-{timestamp}"
    eml_dir.mkdir(parents=True, exist_ok=True)
    for email in emails:
        with (eml_dir / f"{email.id}.eml").open("w", encoding="utf-8", newline="") as f:
            f.write(build_eml(email))
    return eml_dir


_EXPORTERS = {
    "json": export_to_json,
    "csv": export_to_csv,
    "eml": export_to_eml,
}


def export_emails(
    emails: Sequence[EmailRecord],
    export_format: ExportFormat,
    export_dir: Path,
    timestamp: Optional[str] = None,
) -> Path:
    """Export records in one format; returns the written file (or EML directory)."""
    exporter = _EXPORTERS.get(export_format)
    if exporter is None:
        raise ValueError(f"Unsupported export format: {export_format}")
    export_dir.mkdir(parents=True, exist_ok=True)
    path = exporter(emails, export_dir, timestamp or export_timestamp())
    logger.info("exporter.written", format=export_format, path=str(path), email_count=len(emails))
    return path
