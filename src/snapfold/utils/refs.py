"""Reference token parsing.

Outline lines carry `[ref=<token>]` markers; folded lines carry `[refs: t1, t2, ...]`.
"""

from __future__ import annotations

import re

REF_RE = re.compile(r"\[ref=(?P<ref>[^\]\s]+)\]")
FOLD_REFS_RE = re.compile(r"\[refs: (?P<refs>[^\]]*)\]")


def extract_ref(line: str) -> str:
    """Return the first ref on a line, or an empty string."""

    m = REF_RE.search(line)
    return m.group("ref") if m else ""


def extract_refs(text: str) -> list[str]:
    """Extract every ref token from outline text.

    Both single `[ref=...]` markers and folded `[refs: ...]` lists are read.

    Args:
        text: Outline text.

    Returns:
        Ref tokens in first-seen order, without duplicates.
    """

    refs: list[str] = []
    for line in text.splitlines():
        refs.extend(m.group("ref") for m in REF_RE.finditer(line))
        for m in FOLD_REFS_RE.finditer(line):
            refs.extend(p.strip() for p in m.group("refs").split(",") if p.strip())
    seen: set[str] = set()
    out: list[str] = []
    for x in refs:
        if x not in seen:
            out.append(x)
            seen.add(x)
    return out


def format_fold_refs(refs: list[str]) -> str:
    """Render a folded ref list."""

    return f"[refs: {', '.join(refs)}]"
