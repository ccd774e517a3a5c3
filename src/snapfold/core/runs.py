"""Run detection over sibling lists.

A run is a sequence of at least three siblings whose fingerprints all lie within the
similarity threshold of the run's first element (its anchor).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from snapfold.core.simhash import FingerprintEngine, hamming_distance
from snapfold.logging import get_logger
from snapfold.models.outline import ElementNode

logger = get_logger(__name__)

MIN_RUN_LENGTH = 3


@dataclass(frozen=True)
class SimilarRun:
    """A detected run.

    ``start`` and ``end`` are inclusive positions in the sibling list the run was found
    in. ``indices`` lists the members' positions in that list; they are contiguous for
    :meth:`RunDetector.find_similar_sequence`, while runs returned by
    :meth:`RunDetector.find_all_similar_sequences` may skip siblings already claimed by
    an earlier run.
    """

    start: int
    end: int
    base_hash: int
    indices: tuple[int, ...] = field(default=())

    @property
    def count(self) -> int:
        return len(self.indices) if self.indices else self.end - self.start + 1


class RunDetector:
    """Greedy, bounded-cost grouping of similar siblings."""

    def __init__(self, engine: FingerprintEngine | None = None, threshold: int | None = None) -> None:
        self.engine = engine or FingerprintEngine()
        self.threshold = self.engine.threshold if threshold is None else threshold

    def find_similar_sequence(self, nodes: list[ElementNode]) -> SimilarRun | None:
        """Return the longest run in ``nodes``, or ``None``.

        Anchors are tried left to right. From each anchor the window grows while the next
        sibling stays within the threshold of the anchor. A window that breaks before
        reaching three members is abandoned; one that breaks after is closed. Only a
        strictly longer run replaces the best so far, so the first-found run wins ties.
        """

        if len(nodes) < MIN_RUN_LENGTH:
            return None

        hashes = [self.engine.fingerprint(n) for n in nodes]
        max_len = 0
        best_start = best_end = 0
        best_hash = 0

        for i in range(len(nodes) - MIN_RUN_LENGTH + 1):
            base_hash = hashes[i]
            similar_count = 1
            j = i + 1
            while j < len(nodes):
                if hamming_distance(base_hash, hashes[j]) > self.threshold:
                    break
                similar_count += 1
                if similar_count >= MIN_RUN_LENGTH and similar_count > max_len:
                    max_len = similar_count
                    best_start, best_end = i, j
                    best_hash = base_hash
                j += 1

        if max_len < MIN_RUN_LENGTH:
            return None
        return SimilarRun(
            start=best_start,
            end=best_end,
            base_hash=best_hash,
            indices=tuple(range(best_start, best_end + 1)),
        )

    def find_all_similar_sequences(self, nodes: list[ElementNode]) -> list[SimilarRun]:
        """Repeatedly extract runs until no unclaimed run of three remains.

        Each pass searches only the siblings not yet claimed by an earlier run, so no
        sibling belongs to two runs and the loop ends after at most ``len(nodes) // 3``
        passes. Positions in the returned runs refer to ``nodes``.
        """

        runs: list[SimilarRun] = []
        claimed: set[int] = set()

        while len(nodes) - len(claimed) >= MIN_RUN_LENGTH:
            index_map = [i for i in range(len(nodes)) if i not in claimed]
            run = self.find_similar_sequence([nodes[i] for i in index_map])
            if run is None:
                break

            members = tuple(index_map[k] for k in range(run.start, run.end + 1))
            runs.append(
                SimilarRun(
                    start=members[0],
                    end=members[-1],
                    base_hash=run.base_hash,
                    indices=members,
                )
            )
            claimed.update(members)

        if runs:
            logger.debug(
                "Found %d runs covering %d of %d siblings",
                len(runs),
                len(claimed),
                len(nodes),
            )
        return runs
