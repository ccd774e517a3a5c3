"""Tests for run detection over siblings."""

from __future__ import annotations

from snapfold.core.runs import RunDetector
from snapfold.core.tree import build_page_structure


def _siblings(raw: str):
    return build_page_structure(raw).root_nodes[0].children


def test_fewer_than_three_siblings_never_form_a_run(make_rows) -> None:
    """It should not report runs shorter than three."""

    siblings = _siblings("\n".join(["- list", *make_rows(2)]))
    detector = RunDetector()

    assert detector.find_similar_sequence(siblings) is None
    assert detector.find_similar_sequence([]) is None
    assert detector.find_all_similar_sequences(siblings) == []


def test_fifty_identical_rows_form_one_run(product_list) -> None:
    """It should find one run spanning fifty identical rows."""

    siblings = _siblings(product_list)

    runs = RunDetector().find_all_similar_sequences(siblings)

    assert len(runs) == 1
    assert (runs[0].start, runs[0].end, runs[0].count) == (0, 49, 50)
    assert runs[0].indices == tuple(range(50))


def test_dissimilar_sibling_splits_runs(split_list) -> None:
    """Three rows, a heading, three rows: two runs of three, nothing shared."""

    siblings = _siblings(split_list)

    runs = RunDetector().find_all_similar_sequences(siblings)

    assert [r.indices for r in runs] == [(0, 1, 2), (4, 5, 6)]
    assert not set(runs[0].indices) & set(runs[1].indices)


def test_first_found_run_wins_ties(split_list) -> None:
    """It should prefer the leftmost run when lengths tie."""

    run = RunDetector().find_similar_sequence(_siblings(split_list))

    assert run is not None
    assert (run.start, run.end) == (0, 2)


def test_longest_run_is_preferred(make_rows) -> None:
    """It should prefer the longest run over an earlier shorter one."""

    raw = "\n".join(
        ["- list", *make_rows(3), '  - heading "Break"', *make_rows(5, start=4)]
    )
    run = RunDetector().find_similar_sequence(_siblings(raw))

    assert run is not None
    assert (run.start, run.end, run.count) == (4, 8, 5)


def test_structurally_different_siblings_do_not_group() -> None:
    """It should not group siblings with different structure."""

    raw = "\n".join(
        [
            "- main",
            '  - button "Go" [ref=b]',
            "  - list [ref=l]:",
            "    - listitem: one",
            "    - listitem: two",
            "  - navigation [ref=n]:",
            '    - link "Home" [ref=h]:',
            "      - /url: /",
        ]
    )

    assert RunDetector().find_similar_sequence(_siblings(raw)) is None


def test_runs_never_share_members(make_rows) -> None:
    """It should assign each sibling to at most one run."""

    raw = "\n".join(
        [
            "- list",
            *make_rows(4),
            '  - heading "A"',
            *make_rows(3, start=5),
            '  - heading "B"',
            *make_rows(6, start=8),
        ]
    )
    runs = RunDetector().find_all_similar_sequences(_siblings(raw))

    claimed = [i for r in runs for i in r.indices]
    assert len(claimed) == len(set(claimed))
    assert all(r.count >= 3 for r in runs)
