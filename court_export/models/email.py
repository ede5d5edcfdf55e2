"""Email record and thread models (Gmail export shape)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EmailBody(BaseModel):
    """Message body parts as exported; either part may be absent."""

    model_config = ConfigDict(frozen=True)

    plain: Optional[str] = None
    html: Optional[str] = None


class Attachment(BaseModel):
    """Attachment metadata plus opaque base64 payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: str = ""
    mime_type: str = Field("", alias="mimeType")
    data: str = ""


class EmailRecord(BaseModel):
    """Single exported message. Read-only to everything downstream of the loader."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    thread_id: str = Field(alias="threadId")
    subject: str = ""
    from_: str = Field("", alias="from")
    to: str = ""
    date: str = ""
    body: EmailBody = EmailBody()
    attachments: list[Attachment] = []


class Thread(BaseModel):
    """Conversation derived from records sharing a thread id (messages oldest to newest)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    thread_id: str = Field(alias="threadId")
    subject: str
    participants: list[str]
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    message_count: int = Field(alias="messageCount")
    messages: list[EmailRecord]
