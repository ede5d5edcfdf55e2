"""Generated court document value."""

from typing import Literal, Optional

from pydantic import BaseModel


class CourtDocument(BaseModel):
    """Markdown court document and, for PDF requests, the HTML handed to the PDF renderer."""

    markdown: str
    html: Optional[str] = None
    format: Literal["md", "pdf"] = "md"
    thread_count: int
    email_count: int
