"""Page report formatting."""

from __future__ import annotations


def format_snapshot_report(outline: str, *, url: str | None = None, title: str | None = None) -> str:
    """Wrap an outline in the page info block shown to the reader."""

    lines = ["### Page Info"]
    if url is not None:
        lines.append(f"- URL: {url}")
    if title is not None:
        lines.append(f"- Title: {title}")
    lines.extend(["", "### Accessibility Snapshot", outline])
    return "\n".join(lines)
