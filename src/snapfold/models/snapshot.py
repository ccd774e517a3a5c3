"""Snapshot history models.

Each captured snapshot is recorded so later calls can search it again or diff a newer
capture against it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SnapshotRecord(BaseModel):
    """A single recorded snapshot."""

    snapshot_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=datetime.utcnow)

    source: str | None = None
    line_count: int = Field(default=0, ge=0)
    ref_count: int = Field(default=0, ge=0)
    text: str


class SnapshotDiff(BaseModel):
    """Line-level difference between two snapshots."""

    previous_id: str | None = None
    current_id: str | None = None
    diff: str = ""
    added_refs: list[str] = Field(default_factory=list)
    removed_refs: list[str] = Field(default_factory=list)
    message: str | None = None

    @property
    def changed(self) -> bool:
        return bool(self.diff)
