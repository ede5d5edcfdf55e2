"""Thread API routes: exports, thread summaries, search, analysis, preview and generate."""

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from court_export.config import ANALYSIS_CONCURRENCY, ANALYSIS_QUERY
from court_export.mail_store import ExportFileError, JsonExportSource, resolve_export_path
from court_export.models import EmailRecord, Thread
from court_export.pipeline import (
    default_document_path,
    generate_court_document,
    search_and_analyze,
    write_document,
)
from court_export.threads import apply_thread_query, group_by_thread
from court_export.utils.logger import get_logger

from .models import AnalyzeRequest, DocumentRequest, SearchRequest

logger = get_logger("court_export.api.routes")

router = APIRouter(prefix="/api", tags=["threads"])

PREVIEW_CHARS = 100


def _export_path(request: Request, filename: str) -> Path:
    try:
        return resolve_export_path(request.app.state.exports_dir, filename)
    except ExportFileError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _load_emails(request: Request, filename: str) -> list[EmailRecord]:
    """Records of an export; 404 when missing, 422 when unusable."""
    path = _export_path(request, filename)
    try:
        return JsonExportSource(path).list_emails()
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail="File not found") from e
    except ExportFileError as e:
        logger.warning("api.export_invalid", path=str(path), error=str(e))
        raise HTTPException(status_code=422, detail=str(e)) from e


def _message_preview(email: EmailRecord) -> str:
    plain = email.body.plain
    return plain[:PREVIEW_CHARS] + "..." if plain else "(No content)"


def thread_summary(thread: Thread) -> dict[str, Any]:
    """Thread without message bodies, for list views."""
    return {
        "threadId": thread.thread_id,
        "subject": thread.subject or "(No subject)",
        "participants": thread.participants,
        "messageCount": thread.message_count,
        "dateRange": {"start": thread.start_date, "end": thread.end_date},
        "emails": [
            {
                "id": e.id,
                "from": e.from_,
                "to": e.to,
                "subject": e.subject,
                "date": e.date,
                "preview": _message_preview(e),
            }
            for e in thread.messages
        ],
    }


def _document_format(value: str) -> Literal["md", "pdf"]:
    return "pdf" if value == "pdf" else "md"


@router.get("/exports")
async def list_exports(request: Request) -> list[dict[str, Any]]:
    """Export JSON files, newest first."""
    exports_dir: Path = request.app.state.exports_dir
    if not exports_dir.exists():
        return []
    files = []
    for path in exports_dir.glob("*.json"):
        stat = path.stat()
        files.append({
            "filename": path.name,
            "size": stat.st_size,
            "created": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
            "_mtime": stat.st_mtime,
        })
    files.sort(key=lambda f: f["_mtime"], reverse=True)
    for f in files:
        del f["_mtime"]
    return files


@router.delete("/exports/{filename}")
async def delete_export(request: Request, filename: str) -> dict[str, Any]:
    """Delete an export's JSON, CSV and EML directory; 404 when none exist."""
    json_path = _export_path(request, filename)
    base = json_path.stem
    eml_name = f"eml-{base[len('emails-'):]}" if base.startswith("emails-") else base
    csv_path = json_path.with_suffix(".csv")
    eml_dir = json_path.parent / eml_name

    json_deleted = csv_deleted = eml_dir_deleted = False
    if json_path.is_file():
        json_path.unlink()
        json_deleted = True
    if csv_path.is_file():
        csv_path.unlink()
        csv_deleted = True
    if eml_dir.is_dir():
        shutil.rmtree(eml_dir)
        eml_dir_deleted = True

    if not (json_deleted or csv_deleted or eml_dir_deleted):
        raise HTTPException(status_code=404, detail=f"No export files found: {base}")
    logger.info("api.export_deleted", base=base, json=json_deleted, csv=csv_deleted, eml=eml_dir_deleted)
    return {
        "success": True,
        "details": {
            "jsonDeleted": json_deleted,
            "csvDeleted": csv_deleted,
            "emlDirDeleted": eml_dir_deleted,
        },
    }


@router.get("/threads/{filename}")
async def list_threads(request: Request, filename: str) -> list[dict[str, Any]]:
    """Thread summaries for an export, newest activity first."""
    threads = group_by_thread(_load_emails(request, filename))
    logger.info("api.threads_listed", filename=filename, thread_count=len(threads))
    return [thread_summary(t) for t in threads]


@router.get("/threads/{filename}/thread/{thread_id}")
async def get_thread(request: Request, filename: str, thread_id: str) -> dict[str, Any]:
    """One thread with full message content."""
    for thread in group_by_thread(_load_emails(request, filename)):
        if thread.thread_id == thread_id:
            return thread.model_dump(by_alias=True)
    raise HTTPException(status_code=404, detail="Thread not found")


@router.post("/search")
async def search_threads(request: Request, body: SearchRequest) -> dict[str, Any]:
    """Threads of an export matching a ThreadQuery."""
    threads = group_by_thread(_load_emails(request, body.filename))
    matched = apply_thread_query(threads, body)
    return {
        "query": body.query,
        "totalThreads": len(threads),
        "matchedThreads": len(matched),
        "threads": [thread_summary(t) for t in matched],
    }


@router.post("/analyze")
async def analyze_threads(request: Request, body: AnalyzeRequest) -> dict[str, Any]:
    """Search, then analyze the matching threads; results ranked by relevance."""
    analyzer = request.app.state.analyzer
    if analyzer is None:
        raise HTTPException(status_code=503, detail="Thread analysis is not configured")
    emails = _load_emails(request, body.filename)
    report = await search_and_analyze(
        emails,
        body,
        analyzer,
        concurrency=body.concurrency or ANALYSIS_CONCURRENCY,
    )
    return report.model_dump(by_alias=True)


@router.post("/preview")
async def preview_document(request: Request, body: DocumentRequest) -> dict[str, str]:
    """Markdown court document for the selected threads."""
    emails = _load_emails(request, body.filename)
    document = await generate_court_document(
        emails,
        selected_thread_ids=body.selected_threads,
        output_format="md",
        analyzer=request.app.state.analyzer,
        query=ANALYSIS_QUERY,
    )
    return {"preview": document.markdown}


@router.post("/generate")
async def generate_document(request: Request, body: DocumentRequest) -> dict[str, Any]:
    """Write the court document for the selected threads to the output directory."""
    output_format = _document_format(body.output_format)
    emails = _load_emails(request, body.filename)
    document = await generate_court_document(
        emails,
        selected_thread_ids=body.selected_threads,
        output_format=output_format,
        analyzer=request.app.state.analyzer,
        query=ANALYSIS_QUERY,
    )
    path = write_document(
        document,
        default_document_path(request.app.state.output_dir, output_format),
        pdf_renderer=request.app.state.pdf_renderer,
    )
    logger.info("api.document_generated", path=str(path), thread_count=document.thread_count)
    return {
        "success": True,
        "outputPath": str(path),
        "filename": path.name,
        "format": output_format,
    }


@router.get("/download/{filename}")
async def download_document(request: Request, filename: str) -> FileResponse:
    """A generated document from the output directory."""
    output_dir: Path = request.app.state.output_dir
    path = (output_dir / filename).resolve()
    if path.parent != output_dir.resolve() or not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, filename=path.name)
