"""Models used across the project."""

from __future__ import annotations

from snapfold.models.outline import ElementGroup, ElementNode, OutlineOptions, PageStructure
from snapfold.models.search import SearchOptions, SearchResponse
from snapfold.models.snapshot import SnapshotDiff, SnapshotRecord

__all__ = [
    "ElementGroup",
    "ElementNode",
    "OutlineOptions",
    "PageStructure",
    "SearchOptions",
    "SearchResponse",
    "SnapshotDiff",
    "SnapshotRecord",
]
