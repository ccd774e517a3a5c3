"""Structural simhash for outline subtrees.

A node's fingerprint is a 32-bit locality-sensitive hash built from a handful of weighted
structural features (type skeleton, branching shape, counts of significant types,
interactivity and subtree depth). Text content never contributes, so repeated rows that
differ only in their labels land on identical or nearby fingerprints.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from snapfold.logging import get_logger
from snapfold.models.outline import ElementNode

logger = get_logger(__name__)

HASH_BITS = 32
HASH_MASK = (1 << HASH_BITS) - 1
DJB2_SEED = 5381
DEFAULT_THRESHOLD = 3

SKELETON_CHILDREN = 5
SKELETON_GRANDCHILDREN = 3
SHAPE_CHILDREN = 3
TYPE_COUNT_LEVELS = 2
INTERACTIVE_LEVELS = 2

# (type, code letter); "image" is counted together with the aria "img" role
SIGNIFICANT_TYPES: tuple[tuple[str, str], ...] = (
    ("button", "b"),
    ("link", "l"),
    ("text", "t"),
    ("img", "i"),
    ("heading", "h"),
    ("checkbox", "c"),
    ("radio", "r"),
)
TYPE_ALIASES = {"image": "img"}
INTERACTIVE_TYPES = frozenset({"button", "link", "checkbox", "radio"})

FEATURE_WEIGHTS = {
    "skeleton": 5,
    "shape": 3,
    "depth": 2,
    "type_count": 1,
    "interactive": 1,
}


def djb2_hash(text: str) -> int:
    """32-bit unsigned DJB2 string hash (``hash * 33 + ord(c)``, seed 5381)."""

    h = DJB2_SEED
    for ch in text:
        h = (h * 33 + ord(ch)) & HASH_MASK
    return h


def hamming_distance(hash1: int, hash2: int) -> int:
    """Number of differing bits between two fingerprints."""

    return bin((hash1 ^ hash2) & HASH_MASK).count("1")


def simhash(weighted_features: Iterable[tuple[str, int]]) -> int:
    """Combine weighted feature strings into one fingerprint.

    Every feature hash adds ``+weight`` to each bin whose bit is set and ``-weight``
    otherwise; bit ``i`` of the result is set iff bin ``i`` ends up positive.
    """

    vector = [0] * HASH_BITS
    for feature, weight in weighted_features:
        h = djb2_hash(feature)
        for i in range(HASH_BITS):
            vector[i] += weight if (h >> i) & 1 else -weight

    value = 0
    for i, v in enumerate(vector):
        if v > 0:
            value |= 1 << i
    return value


class FingerprintEngine:
    """Computes and memoizes structural fingerprints.

    The cache is keyed by ``ElementNode.node_id``. Ids are only unique within one parsed
    snapshot, so call :meth:`clear_cache` before reusing an engine on another snapshot.
    """

    def __init__(self, threshold: int = DEFAULT_THRESHOLD) -> None:
        self.threshold = threshold
        self._cache: dict[int, int] = {}

    def extract_features(self, node: ElementNode) -> list[tuple[str, str]]:
        """Return ``(kind, feature)`` pairs describing the node's structure."""

        features = [
            ("skeleton", self._skeleton_signature(node)),
            ("shape", self._shape_signature(node)),
            ("type_count", self._type_count_signature(node)),
        ]
        if self._has_interactive(node):
            features.append(("interactive", "interactive"))
        features.append(("depth", f"d{self._max_depth(node)}"))
        return features

    @staticmethod
    def _skeleton_signature(node: ElementNode) -> str:
        signature = node.type
        child_types = "+".join(c.type for c in node.children[:SKELETON_CHILDREN])
        if child_types:
            signature += f">{child_types}"
        if node.children and node.children[0].children:
            grandchild_types = "+".join(
                c.type for c in node.children[0].children[:SKELETON_GRANDCHILDREN]
            )
            signature += f">{grandchild_types}"
        return signature

    @staticmethod
    def _shape_signature(node: ElementNode) -> str:
        widths = [len(node.children)]
        widths.extend(len(c.children) for c in node.children[:SHAPE_CHILDREN])
        return "w" + "-".join(str(w) for w in widths)

    @staticmethod
    def _type_count_signature(node: ElementNode) -> str:
        counts: Counter[str] = Counter()

        def count(n: ElementNode, level: int) -> None:
            if level > TYPE_COUNT_LEVELS:
                return
            counts[TYPE_ALIASES.get(n.type, n.type)] += 1
            for c in n.children:
                count(c, level + 1)

        count(node, 0)
        sig = "".join(f"{code}{counts[t]}" for t, code in SIGNIFICANT_TYPES if counts[t])
        return sig or "empty"

    @staticmethod
    def _has_interactive(node: ElementNode) -> bool:
        if node.has_pointer:
            return True

        def check(n: ElementNode, level: int) -> bool:
            if level > INTERACTIVE_LEVELS:
                return False
            if n.type in INTERACTIVE_TYPES:
                return True
            return any(check(c, level + 1) for c in n.children)

        return check(node, 0)

    def _max_depth(self, node: ElementNode) -> int:
        if not node.children:
            return 0
        return 1 + max(self._max_depth(c) for c in node.children)

    def fingerprint(self, node: ElementNode) -> int:
        """Return the node's 32-bit fingerprint, computing it on first use."""

        cached = self._cache.get(node.node_id)
        if cached is not None:
            return cached

        value = simhash(
            (feature, FEATURE_WEIGHTS[kind]) for kind, feature in self.extract_features(node)
        )
        self._cache[node.node_id] = value
        return value

    def hamming_distance(self, hash1: int, hash2: int) -> int:
        return hamming_distance(hash1, hash2)

    def are_similar(self, node1: ElementNode, node2: ElementNode, threshold: int | None = None) -> bool:
        """Whether two nodes' fingerprints are within ``threshold`` bits."""

        limit = self.threshold if threshold is None else threshold
        return hamming_distance(self.fingerprint(node1), self.fingerprint(node2)) <= limit

    def clear_cache(self) -> None:
        """Forget all memoized fingerprints."""

        if self._cache:
            logger.debug("Clearing %d cached fingerprints", len(self._cache))
        self._cache.clear()

    def cache_size(self) -> int:
        return len(self._cache)
