"""Structural similarity compression for accessibility snapshot outlines."""

from __future__ import annotations

from snapfold.core.outline import OutlineGenerator, OutlineResult, generate
from snapfold.core.runs import RunDetector, SimilarRun
from snapfold.core.simhash import FingerprintEngine, hamming_distance
from snapfold.core.tree import build_page_structure, build_tree
from snapfold.models.outline import ElementGroup, ElementNode, OutlineOptions, PageStructure

__all__ = [
    "ElementGroup",
    "ElementNode",
    "FingerprintEngine",
    "OutlineGenerator",
    "OutlineOptions",
    "OutlineResult",
    "PageStructure",
    "RunDetector",
    "SimilarRun",
    "build_page_structure",
    "build_tree",
    "generate",
    "hamming_distance",
]
