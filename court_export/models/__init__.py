"""Pydantic models for email threads, analysis and court documents."""

from court_export.models.email import Attachment, EmailBody, EmailRecord, Thread
from court_export.models.analysis import AnalysisReport, AnalysisResult
from court_export.models.filters import DateRange, ThreadQuery
from court_export.models.document import CourtDocument

__all__ = [
    "Attachment",
    "EmailBody",
    "EmailRecord",
    "Thread",
    "AnalysisReport",
    "AnalysisResult",
    "DateRange",
    "ThreadQuery",
    "CourtDocument",
]
