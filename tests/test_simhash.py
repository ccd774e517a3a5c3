"""Tests for structural fingerprints."""

from __future__ import annotations

from snapfold.core.simhash import FingerprintEngine, djb2_hash, hamming_distance, simhash
from snapfold.core.tree import build_page_structure


def test_djb2_hash_known_values() -> None:
    """It should match known 32-bit DJB2 values."""

    assert djb2_hash("") == 5381
    assert djb2_hash("a") == 5381 * 33 + ord("a")
    assert 0 <= djb2_hash("x" * 1000) < 2**32


def test_hamming_distance_is_a_metric_on_bits() -> None:
    """It should count differing bits symmetrically."""

    pairs = [(0, 0xFFFFFFFF), (0b1011, 0b0001), (123456789, 987654321), (0, 0)]
    for a, b in pairs:
        assert hamming_distance(a, b) == hamming_distance(b, a)
        assert hamming_distance(a, a) == 0
    assert hamming_distance(0, 0xFFFFFFFF) == 32
    assert hamming_distance(0b1011, 0b0001) == 2


def test_single_feature_simhash_equals_its_hash() -> None:
    """With one feature, every bin's sign is that feature's bit."""

    assert simhash([("listitem>link", 5)]) == djb2_hash("listitem>link")


def test_extract_features(make_rows) -> None:
    """It should extract skeleton, shape, type and interactive features."""

    structure = build_page_structure("\n".join(make_rows(1, indent="")))
    engine = FingerprintEngine()

    features = dict(engine.extract_features(structure.root_nodes[0]))

    assert features == {
        "skeleton": "listitem>link>/url",
        "shape": "w1-1",
        "type_count": "l1",
        "interactive": "interactive",
        "depth": "d2",
    }


def test_skeleton_limits_children_and_grandchildren() -> None:
    """It should stop the skeleton at grandchildren."""

    raw = "\n".join(
        ["- list"]
        + ["  - listitem:", "    - link", "    - img", "    - text: a", "    - button"]
        + ["  - listitem"] * 6
    )
    node = build_page_structure(raw).root_nodes[0]

    features = dict(FingerprintEngine().extract_features(node))

    assert features["skeleton"] == "list>" + "+".join(["listitem"] * 5) + ">link+img+text"
    assert features["shape"] == "w7-4-0-0"
    assert features["type_count"] == "b1l1t1i1"
    assert features["depth"] == "d2"


def test_leaf_without_significant_types() -> None:
    """It should describe a leaf with no significant types as empty."""

    node = build_page_structure("- paragraph: hi").root_nodes[0]

    features = dict(FingerprintEngine().extract_features(node))

    assert features["type_count"] == "empty"
    assert "interactive" not in features
    assert features["depth"] == "d0"


def test_pointer_cursor_marks_interactive() -> None:
    """It should treat a pointer cursor as interactive."""

    node = build_page_structure("- generic [ref=e1] [cursor=pointer]").root_nodes[0]

    assert "interactive" in dict(FingerprintEngine().extract_features(node))


def test_fingerprint_ignores_text(make_rows) -> None:
    """It should give rows differing only in text the same fingerprint."""

    structure = build_page_structure("\n".join(["- list", *make_rows(2)]))
    first, second = structure.root_nodes[0].children
    engine = FingerprintEngine()

    assert engine.fingerprint(first) == engine.fingerprint(second)
    assert engine.are_similar(first, second)


def test_fingerprint_is_memoized_until_cleared(make_rows) -> None:
    """It should cache fingerprints until the cache is cleared."""

    structure = build_page_structure("\n".join(make_rows(1, indent="")))
    node = structure.root_nodes[0]
    engine = FingerprintEngine()

    value = engine.fingerprint(node)
    assert 0 <= value < 2**32
    assert engine.fingerprint(node) == value
    assert engine.cache_size() == 1

    engine.clear_cache()
    assert engine.cache_size() == 0
    assert engine.fingerprint(node) == value
