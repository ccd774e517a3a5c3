"""Tests for snapshot recording and diffing."""

from __future__ import annotations

from pathlib import Path

from snapfold.recording.snapshot_store import SnapshotStore, iter_snapshots
from snapfold.tools.diff import NO_PREVIOUS_MESSAGE, UNCHANGED_MESSAGE, diff_since, diff_snapshots
from snapfold.utils.refs import extract_refs

BEFORE = '- main [ref=m]:\n  - button "Add" [ref=b1]\n  - link "Cart" [ref=l1]'
AFTER = '- main [ref=m]:\n  - button "Add" [ref=b1]\n  - dialog [ref=d1]: Added to cart'


def test_store_appends_and_reloads(tmp_path: Path) -> None:
    """It should persist records to JSONL and read them back in order."""

    store = SnapshotStore(tmp_path / "history")
    first = store.append(BEFORE, source="before.txt")
    second = store.append(AFTER)

    assert (first.seq, second.seq) == (1, 2)
    assert first.line_count == 3
    assert first.ref_count == 3
    assert first.snapshot_id != second.snapshot_id

    reloaded = SnapshotStore(tmp_path / "history")
    assert reloaded.count() == 2
    assert reloaded.last().text == AFTER
    assert [r.source for r in iter_snapshots(reloaded.path)] == ["before.txt", None]


def test_store_preview_does_not_write(tmp_path: Path) -> None:
    """It should build a record without writing it."""

    store = SnapshotStore(tmp_path)

    record = store.preview(BEFORE)

    assert record.seq == 1
    assert store.count() == 0
    assert store.last() is None


def test_diff_snapshots_reports_ref_changes() -> None:
    """It should report added and removed refs."""

    result = diff_snapshots(BEFORE, AFTER)

    assert result.changed
    assert '+  - dialog [ref=d1]: Added to cart' in result.diff
    assert '-  - link "Cart" [ref=l1]' in result.diff
    assert result.added_refs == ["d1"]
    assert result.removed_refs == ["l1"]


def test_diff_of_identical_snapshots() -> None:
    """It should report no changes for identical snapshots."""

    result = diff_snapshots(BEFORE, BEFORE)

    assert not result.changed
    assert result.message == UNCHANGED_MESSAGE


def test_diff_since_without_previous(tmp_path: Path) -> None:
    """It should say there is nothing to compare against."""

    store = SnapshotStore(tmp_path)
    current = store.preview(BEFORE)

    result = diff_since(store.last(), current)

    assert result.message == NO_PREVIOUS_MESSAGE
    assert result.current_id == current.snapshot_id
    assert not result.changed


def test_diff_since_last_recorded(tmp_path: Path) -> None:
    """It should diff against the last recorded snapshot."""

    store = SnapshotStore(tmp_path)
    previous = store.append(BEFORE)

    result = diff_since(store.last(), store.append(AFTER))

    assert result.previous_id == previous.snapshot_id
    assert result.added_refs == ["d1"]


def test_extract_refs_reads_fold_lines() -> None:
    """It should read refs from both single markers and fold lists."""

    text = "- list [ref=l]:\n  - listitem (... and 2 more similar) [refs: a, b, c]"

    assert extract_refs(text) == ["l", "a", "b", "c"]
