"""Outline tree builder.

Parses indentation-delimited snapshot text into an arena of :class:`ElementNode` objects.
Each line is one node; its depth is its indentation in two-space steps. A node attaches to
the nearest preceding node that is shallower than it, so skipped or negative depth jumps
clamp to the closest valid ancestor instead of failing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from snapfold.logging import get_logger
from snapfold.models.outline import ElementNode, PageStructure
from snapfold.utils.refs import FOLD_REFS_RE, REF_RE, extract_ref

logger = get_logger(__name__)

INDENT_WIDTH = 2
POINTER_MARKER = "[cursor=pointer]"

_LINE_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<marker>-\s+)?"
    r"(?P<type>[^\s:\[\]\"]+)?"
    r"(?:\s+\"(?P<name>(?:[^\"\\]|\\.)*)\")?"
    r"(?P<attrs>(?:\s*\[[^\]]*\])*)"
    r"(?::\s*(?P<inline>.*?))?\s*$"
)
_FOLD_LINE_RE = re.compile(r"\(\.\.\. and \d+ more similar\) " + FOLD_REFS_RE.pattern + r"\s*$")
_FOLD_HEAD_RE = re.compile(r"^(?P<indent>[ \t]*)(?:-\s+)?(?P<type>\S+)(?:\s+\"(?P<name>(?:[^\"\\]|\\.)*)\")?")
_TRAILING_ATTRS_RE = re.compile(r"(?:\s*\[[^\]]*\])+\s*:?\s*$")


@dataclass(frozen=True)
class ParsedLine:
    """Fields read from a single outline line."""

    depth: int
    type: str
    ref: str
    content: str
    content_span: tuple[int, int] | None
    has_pointer: bool
    fold_refs: tuple[str, ...] = ()


def _depth_of(indent: str) -> int:
    return len(indent.expandtabs(INDENT_WIDTH)) // INDENT_WIDTH


def _text_end(text: str) -> int:
    """Length of the free text in ``text``, stopping before any ref or trailing attribute."""

    ref = REF_RE.search(text)
    end = ref.start() if ref else len(text)
    attrs = _TRAILING_ATTRS_RE.search(text[:end])
    if attrs:
        end = attrs.start()
    return len(text[:end].rstrip())


def parse_line(line: str) -> ParsedLine:
    """Parse one outline line.

    Lines that do not follow the `- type "name" [attr] [ref=..]: text` shape are still
    accepted; their text up to the first ref or trailing attribute becomes a `text` node.
    """

    has_pointer = POINTER_MARKER in line
    ref = extract_ref(line)

    fold = _FOLD_LINE_RE.search(line)
    if fold:
        head = _FOLD_HEAD_RE.match(line)
        refs = tuple(p.strip() for p in fold.group("refs").split(",") if p.strip())
        indent = head.group("indent") if head else ""
        name = head.group("name") if head else None
        return ParsedLine(
            depth=_depth_of(indent),
            type=head.group("type") if head else "text",
            ref=ref,
            content=name or "",
            content_span=head.span("name") if head and name is not None else None,
            has_pointer=has_pointer,
            fold_refs=refs,
        )

    m = _LINE_RE.match(line)
    if m and m.group("type") and (m.group("marker") or m.group("attrs") or m.group("name") is not None):
        if m.group("name") is not None:
            return ParsedLine(
                depth=_depth_of(m.group("indent")),
                type=m.group("type"),
                ref=ref,
                content=m.group("name"),
                content_span=m.span("name"),
                has_pointer=has_pointer,
            )
        inline = m.group("inline") or ""
        start = m.start("inline") if inline else -1
        inline = inline[: _text_end(inline)]
        end = start + len(inline)
        if len(inline) >= 2 and inline[0] == inline[-1] == '"':
            inline = inline[1:-1]
            start, end = start + 1, end - 1
        return ParsedLine(
            depth=_depth_of(m.group("indent")),
            type=m.group("type"),
            ref=ref,
            content=inline,
            content_span=(start, end) if inline else None,
            has_pointer=has_pointer,
        )

    indent = line[: len(line) - len(line.lstrip(" \t"))]
    body_start = len(indent)
    if line.startswith("- ", body_start):
        body_start += 2
    body = line[body_start:]
    body = body[: _text_end(body)]
    return ParsedLine(
        depth=_depth_of(indent),
        type="text" if body else "generic",
        ref=ref,
        content=body,
        content_span=(body_start, body_start + len(body)) if body else None,
        has_pointer=has_pointer,
    )


def build_page_structure(raw: str) -> PageStructure:
    """Build the node arena and lookup tables for one raw snapshot.

    Args:
        raw: Snapshot text, one node per line.

    Returns:
        PageStructure: Arena, roots and ref/line lookups. Groups and priorities are
        filled in later by the outline generator.
    """

    structure = PageStructure()
    lines = raw.splitlines()
    structure.total_lines = len(lines)

    stack: list[ElementNode] = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        parsed = parse_line(line)
        node = ElementNode(
            node_id=len(structure.nodes),
            depth=parsed.depth,
            type=parsed.type,
            ref=parsed.ref,
            content=parsed.content,
            line=line,
            line_number=line_number,
            content_span=parsed.content_span,
            has_pointer=parsed.has_pointer,
            is_repetitive=bool(parsed.fold_refs),
            fold_refs=list(parsed.fold_refs),
        )
        structure.nodes.append(node)
        structure.nodes_by_line[line_number] = node
        if node.ref:
            if node.ref in structure.nodes_by_ref:
                logger.debug("Duplicate ref %s on line %d; keeping first", node.ref, line_number)
            else:
                structure.nodes_by_ref[node.ref] = node

        while stack and stack[-1].depth >= node.depth:
            stack.pop()
        if stack:
            parent = stack[-1]
            node.parent_id = parent.node_id
            parent.children.append(node)
        else:
            structure.root_nodes.append(node)
        stack.append(node)

    logger.debug(
        "Built tree: %d nodes, %d roots, %d refs",
        len(structure.nodes),
        len(structure.root_nodes),
        len(structure.nodes_by_ref),
    )
    return structure


def build_tree(raw: str) -> list[ElementNode]:
    """Parse snapshot text and return its root nodes."""

    return build_page_structure(raw).root_nodes
