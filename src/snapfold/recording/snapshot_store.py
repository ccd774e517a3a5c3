"""File-based snapshot history.

Records raw snapshots to `snapshots.jsonl` so a later call can search the last capture or
diff a new capture against it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from snapfold.logging import get_logger
from snapfold.models.snapshot import SnapshotRecord
from snapfold.utils.ids import snapshot_id
from snapfold.utils.refs import extract_refs

logger = get_logger(__name__)


@dataclass
class SnapshotStore:
    """Append-only JSONL store of raw snapshots."""

    root: Path

    def __post_init__(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.root / "snapshots.jsonl"

    def preview(self, text: str, *, source: str | None = None) -> SnapshotRecord:
        """Build the record `append` would write, without writing it."""

        return SnapshotRecord(
            snapshot_id=snapshot_id(text),
            seq=self.count() + 1,
            source=source,
            line_count=len(text.splitlines()),
            ref_count=len(extract_refs(text)),
            text=text,
        )

    def append(self, text: str, *, source: str | None = None) -> SnapshotRecord:
        """Record a raw snapshot and return its record."""

        record = self.preview(text, source=source)
        line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        logger.debug("Recorded snapshot %s (seq=%d) to %s", record.snapshot_id, record.seq, self.path)
        return record

    def last(self) -> SnapshotRecord | None:
        """Return the most recently recorded snapshot."""

        records = iter_snapshots(self.path)
        return records[-1] if records else None

    def count(self) -> int:
        return len(iter_snapshots(self.path))


def iter_snapshots(path: Path) -> list[SnapshotRecord]:
    """Load all snapshot records from a JSONL file."""

    records: list[SnapshotRecord] = []
    if not path.exists():
        return records
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        records.append(SnapshotRecord.model_validate_json(line))
    return records
