"""Outline models.

Nodes live in an arena owned by :class:`PageStructure`: every node has a stable integer
``node_id`` and parents own their children. The parent link is the parent's id, never an
object reference, so the tree holds no reference cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field


OutlineMode = Literal["smart", "simple"]


@dataclass(eq=False)
class ElementNode:
    """One parsed outline entry."""

    node_id: int
    depth: int
    type: str
    ref: str
    content: str
    line: str
    line_number: int
    children: list[ElementNode] = field(default_factory=list)
    parent_id: int | None = None

    priority: int = 0
    is_repetitive: bool = False
    group_id: str | None = None

    # Span of ``content`` inside ``line``; used to truncate text in place.
    content_span: tuple[int, int] | None = None
    has_pointer: bool = False
    # Refs carried by an already-folded line, e.g. when re-reading compressed output.
    fold_refs: list[str] = field(default_factory=list)

    @property
    def indent(self) -> str:
        return self.line[: len(self.line) - len(self.line.lstrip(" \t"))]


@dataclass
class ElementGroup:
    """A folded run of similar siblings.

    ``refs`` lists the members' own reference tokens in document order; members
    without a ref are counted but contribute no token.
    """

    group_id: str
    type: str
    depth: int
    count: int
    samples: list[ElementNode]
    refs: list[str]
    start_line: int
    end_line: int
    priority: int = 0

    @property
    def first_element(self) -> ElementNode:
        return self.samples[0]


@dataclass
class PageStructure:
    """A parsed snapshot: the node arena plus lookup tables."""

    nodes: list[ElementNode] = field(default_factory=list)
    nodes_by_ref: dict[str, ElementNode] = field(default_factory=dict)
    nodes_by_line: dict[int, ElementNode] = field(default_factory=dict)
    groups: list[ElementGroup] = field(default_factory=list)
    priority_queue: list[ElementNode] = field(default_factory=list)
    total_lines: int = 0
    root_nodes: list[ElementNode] = field(default_factory=list)

    def parent_of(self, node: ElementNode) -> ElementNode | None:
        if node.parent_id is None:
            return None
        return self.nodes[node.parent_id]

    def has_ref(self, ref: str) -> bool:
        """Return whether ``ref`` belongs to this snapshot."""

        return ref in self.nodes_by_ref

    def refs(self) -> list[str]:
        return list(self.nodes_by_ref)


class OutlineOptions(BaseModel):
    """Caller-supplied outline generation options."""

    max_lines: int = Field(default=500, ge=1)
    mode: OutlineMode = "smart"
    preserve_structure: bool = True
    fold_threshold: int = Field(default=3, ge=0, le=32)
    text_limit: int = Field(default=50, ge=1)
