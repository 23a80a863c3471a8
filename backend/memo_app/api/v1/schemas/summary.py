from __future__ import annotations

from pydantic import BaseModel, Field


class SummarizeRequest(BaseModel):
    """Memo text to summarize. Content is checked by the endpoint, not here."""

    title: str | None = Field(default=None, description="Memo title")
    content: str | None = Field(default=None, description="Memo content")


class SummarizeResponse(BaseModel):
    summary: str = Field(..., description="Trimmed summary text")
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
