"""Regex search over snapshot text."""

from __future__ import annotations

import re

from snapfold.logging import get_logger
from snapfold.models.search import MAX_SEARCH_LINES, SearchOptions, SearchResponse

logger = get_logger(__name__)


def search_snapshot(snapshot: str, options: SearchOptions) -> SearchResponse:
    """Return the snapshot lines matching ``options.pattern``.

    At most ``min(line_limit, 100)`` lines are returned; extra matches are summarised by a
    trailing ``<...N more results...>`` line. An invalid pattern is reported in the
    response instead of raised.
    """

    limit = max(1, min(options.line_limit, MAX_SEARCH_LINES))
    flags = re.IGNORECASE if options.ignore_case else 0
    try:
        regex = re.compile(options.pattern, flags)
    except re.error as e:
        logger.warning("Invalid search pattern %r: %s", options.pattern, e)
        return SearchResponse(
            result=f"Error: Invalid regex pattern - {e}",
            match_count=0,
            truncated=False,
            error=str(e),
        )

    matching = [line for line in snapshot.split("\n") if regex.search(line)]
    total = len(matching)
    if total > limit:
        shown = matching[:limit]
        shown.append(f"<...{total - limit} more results...>")
        return SearchResponse(result="\n".join(shown), match_count=total, truncated=True)

    return SearchResponse(result="\n".join(matching), match_count=total, truncated=False)


def format_search_response(pattern: str, response: SearchResponse, line_limit: int) -> str:
    """Render a search response for display."""

    if response.error:
        return response.result
    if response.match_count == 0:
        return f"No matches found for pattern: {pattern}"
    if response.truncated:
        header = f"Found {response.match_count} matches (showing first {line_limit}):"
    else:
        header = f"Found {response.match_count} matches:"
    return f"{header}\n\n{response.result}"
