"""Thread analysis result model."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisResult(BaseModel):
    """Parsed LLM analysis of one thread."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    thread_id: str = Field(alias="threadId")
    subject: str
    summary: str = ""
    topics: list[str] = []
    relevance_score: int = Field(0, alias="relevanceScore")
    sentiment_score: Optional[int] = Field(None, alias="sentimentScore")  # -1 | 0 | 1
    key_insights: list[str] = Field(default_factory=list, alias="keyInsights")


class AnalysisReport(BaseModel):
    """Output of a search-and-analyze run, as written to analysis-*.json."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    total_threads: int = Field(alias="totalThreads")
    matched_threads: int = Field(alias="matchedThreads")
    analysis_results: list[AnalysisResult] = Field(alias="analysisResults")
