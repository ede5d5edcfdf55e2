"""Thread filter parameters shared by the CLI and the HTTP API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DateRange(BaseModel):
    """Inclusive window; either bound may be omitted."""

    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None


class ThreadQuery(BaseModel):
    """Query terms plus structural filters applied to grouped threads."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    min_messages: int = Field(1, alias="minMessages")
    date_range: Optional[DateRange] = Field(None, alias="dateRange")
    participants: list[str] = []
