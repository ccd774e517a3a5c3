"""Tools that sit around the outline engine."""

from __future__ import annotations

from snapfold.tools.diff import diff_since, diff_snapshots
from snapfold.tools.report import format_snapshot_report
from snapfold.tools.search import format_search_response, search_snapshot

__all__ = [
    "diff_since",
    "diff_snapshots",
    "format_search_response",
    "format_snapshot_report",
    "search_snapshot",
]
