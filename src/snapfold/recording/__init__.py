"""Recording utilities for captured snapshots."""

from __future__ import annotations

from snapfold.recording.snapshot_store import SnapshotStore, iter_snapshots

__all__ = ["SnapshotStore", "iter_snapshots"]
