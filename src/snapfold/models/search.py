"""Search-related models."""

from __future__ import annotations

from pydantic import BaseModel, Field

MAX_SEARCH_LINES = 100


class SearchOptions(BaseModel):
    """Options for a regex search over a snapshot."""

    pattern: str
    ignore_case: bool = False
    line_limit: int = Field(default=MAX_SEARCH_LINES)


class SearchResponse(BaseModel):
    """Matching lines joined by newlines, or an in-band error message."""

    result: str
    match_count: int = Field(ge=0)
    truncated: bool = False
    error: str | None = None
