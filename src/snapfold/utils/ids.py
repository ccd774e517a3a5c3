"""ID utilities."""

from __future__ import annotations

import hashlib
import uuid


def format_group_id(n: int, prefix: str = "grp_") -> str:
    """Format a numeric counter to a fold group id (e.g. grp_0001)."""

    return f"{prefix}{n:04d}"


def new_pass_id() -> str:
    """Return a short id for one compression pass, used in log context."""

    return uuid.uuid4().hex[:8]


def snapshot_id(text: str) -> str:
    """Content-addressed id for a raw snapshot."""

    return "snap_" + hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
