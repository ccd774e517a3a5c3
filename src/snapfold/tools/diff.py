"""Snapshot diffing."""

from __future__ import annotations

import difflib

from snapfold.models.snapshot import SnapshotDiff, SnapshotRecord
from snapfold.utils.refs import extract_refs

NO_PREVIOUS_MESSAGE = "No previous snapshot recorded; nothing to diff against."
UNCHANGED_MESSAGE = "No changes since the previous snapshot."


def diff_snapshots(previous: str, current: str, *, context: int = 1) -> SnapshotDiff:
    """Unified line diff of two snapshots plus the refs that appeared or vanished."""

    lines = difflib.unified_diff(
        previous.splitlines(),
        current.splitlines(),
        fromfile="previous",
        tofile="current",
        n=context,
        lineterm="",
    )
    before = extract_refs(previous)
    after = extract_refs(current)
    before_set, after_set = set(before), set(after)
    diff = "\n".join(lines)
    return SnapshotDiff(
        diff=diff,
        added_refs=[r for r in after if r not in before_set],
        removed_refs=[r for r in before if r not in after_set],
        message=None if diff else UNCHANGED_MESSAGE,
    )


def diff_since(previous: SnapshotRecord | None, current: SnapshotRecord) -> SnapshotDiff:
    """Diff ``current`` against the last recorded snapshot, if there is one."""

    if previous is None:
        return SnapshotDiff(current_id=current.snapshot_id, message=NO_PREVIOUS_MESSAGE)
    result = diff_snapshots(previous.text, current.text)
    result.previous_id = previous.snapshot_id
    result.current_id = current.snapshot_id
    return result
