"""Tests for snapshot search."""

from __future__ import annotations

from snapfold.models.search import SearchOptions
from snapfold.tools.search import format_search_response, search_snapshot

SNAPSHOT = "\n".join(
    [
        "- navigation [ref=e1]:",
        '  - link "Login" [ref=e2]',
        '  - link "Sign up" [ref=e3]',
        '- button "LOGIN now" [ref=e4]',
    ]
)


def test_search_returns_matching_lines() -> None:
    """It should return every matching line."""

    response = search_snapshot(SNAPSHOT, SearchOptions(pattern=r"link \""))

    assert response.match_count == 2
    assert not response.truncated
    assert response.result.splitlines() == ['  - link "Login" [ref=e2]', '  - link "Sign up" [ref=e3]']


def test_search_ignore_case() -> None:
    """It should match case-insensitively when asked."""

    assert search_snapshot(SNAPSHOT, SearchOptions(pattern="login")).match_count == 0
    assert search_snapshot(SNAPSHOT, SearchOptions(pattern="login", ignore_case=True)).match_count == 2


def test_search_caps_results_at_one_hundred_lines() -> None:
    """It should cap results at one hundred lines with a trailer."""

    snapshot = "\n".join(f'- listitem "Row {i}" [ref=r{i}]' for i in range(150))

    response = search_snapshot(snapshot, SearchOptions(pattern="Row", line_limit=500))

    lines = response.result.splitlines()
    assert response.match_count == 150
    assert response.truncated
    assert len(lines) == 101
    assert lines[-1] == "<...50 more results...>"


def test_search_respects_smaller_limit() -> None:
    """It should honour a line limit below one hundred."""

    response = search_snapshot(SNAPSHOT, SearchOptions(pattern="ref", line_limit=1))

    assert response.result.splitlines() == ["- navigation [ref=e1]:", "<...3 more results...>"]


def test_invalid_pattern_is_reported_not_raised() -> None:
    """It should report an invalid pattern instead of raising."""

    response = search_snapshot(SNAPSHOT, SearchOptions(pattern="(unclosed"))

    assert response.match_count == 0
    assert response.error
    assert response.result.startswith("Error: Invalid regex pattern - ")
    assert format_search_response("(unclosed", response, 100) == response.result


def test_format_search_response() -> None:
    """It should format a header and the matching lines."""

    found = search_snapshot(SNAPSHOT, SearchOptions(pattern="Sign"))
    assert format_search_response("Sign", found, 100).startswith("Found 1 matches:\n\n")

    missing = search_snapshot(SNAPSHOT, SearchOptions(pattern="absent"))
    assert format_search_response("absent", missing, 100) == "No matches found for pattern: absent"
