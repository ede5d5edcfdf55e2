"""Request bodies for the thread API."""

from typing import Optional

from pydantic import BaseModel, Field

from court_export.models.filters import ThreadQuery


class SearchRequest(ThreadQuery):
    """ThreadQuery against one export file."""

    filename: str


class AnalyzeRequest(SearchRequest):
    concurrency: Optional[int] = Field(None, ge=1)


class DocumentRequest(BaseModel):
    """Threads of one export selected for a preview or a generated document."""

    filename: str
    selected_threads: list[str] = Field(..., alias="selectedThreads")
    output_format: str = Field("md", alias="outputFormat")

    model_config = {"populate_by_name": True, "extra": "ignore"}
