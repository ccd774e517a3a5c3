"""Outline generator.

Compresses a raw snapshot into a shorter outline:

1. wrapper removal: text-less, role-less nodes with a single child are spliced out;
2. text truncation: long names are cut in place with a "N more characters" marker;
3. run folding (``smart`` mode): each run of similar siblings becomes one line listing
   every member's ref;
4. budget enforcement: lowest-priority leaves are dropped until ``max_lines`` is met.

Every emitted line is either an original line (possibly truncated or re-indented) or a
fold line. Malformed input is never an error; unrecognised lines pass through.
"""

from __future__ import annotations

import heapq
import re
from dataclasses import dataclass, field

from snapfold.core.runs import RunDetector
from snapfold.core.simhash import FingerprintEngine
from snapfold.core.tree import build_page_structure
from snapfold.logging import compression_context, get_logger, set_stage
from snapfold.models.outline import ElementGroup, ElementNode, OutlineOptions, PageStructure
from snapfold.utils.ids import format_group_id, new_pass_id
from snapfold.utils.refs import format_fold_refs

logger = get_logger(__name__)

MAX_GROUP_SAMPLES = 3
INDENT = "  "

# Roles that carry no meaning of their own; such a node is a wrapper when it also has
# no text and exactly one child.
WRAPPER_TYPES = frozenset({"generic", "group", "none", "presentation", "div", "span", "section"})
INTERACTIVE_ROLES = frozenset(
    {
        "button",
        "link",
        "textbox",
        "searchbox",
        "checkbox",
        "radio",
        "combobox",
        "option",
        "menuitem",
        "tab",
        "switch",
        "slider",
    }
)

_TRUNCATED_RE = re.compile(r"\.\.\. \(\d+ more characters\)$")


def score_priority(node: ElementNode) -> int:
    """Priority in 0..10: interactive, labelled and shallow nodes rank higher."""

    score = 5
    if node.type in INTERACTIVE_ROLES or node.has_pointer:
        score += 3
    if node.type == "heading":
        score += 1
    if node.content.strip():
        score += 1
    score -= min(3, max(0, node.depth - 3))
    return max(0, min(10, score))


def truncate_text(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters plus a remaining-count marker.

    Text that already ends with a marker is returned unchanged.
    """

    if len(text) <= limit or _TRUNCATED_RE.search(text):
        return text
    return f"{text[:limit]}... ({len(text) - limit} more characters)"


@dataclass
class _OutlineItem:
    """A node or folded group in the compressed tree."""

    element: ElementNode | ElementGroup
    children: list[_OutlineItem] = field(default_factory=list)


@dataclass
class _Entry:
    element: ElementNode | ElementGroup
    level: int
    priority: int
    protected: bool
    line_number: int
    parent: int | None
    # elided once a drop leaves it with a single child
    wrapper: bool = False
    children: int = 0


@dataclass
class OutlineResult:
    """Compressed outline plus statistics about the pass."""

    text: str
    original_lines: int
    output_lines: int
    groups: list[ElementGroup]
    dropped: int
    structure: PageStructure

    @property
    def compression_ratio(self) -> float:
        if not self.original_lines:
            return 1.0
        return self.output_lines / self.original_lines

    @property
    def folded_members(self) -> int:
        return sum(g.count for g in self.groups)


class OutlineGenerator:
    """Builds compressed outlines from raw snapshots.

    The generator owns a :class:`FingerprintEngine`; its cache is cleared at the start of
    every call because node ids restart for each parsed snapshot.
    """

    def __init__(self, options: OutlineOptions | None = None, engine: FingerprintEngine | None = None) -> None:
        self.options = options or OutlineOptions()
        self.engine = engine or FingerprintEngine(threshold=self.options.fold_threshold)

    def generate(self, raw: str, options: OutlineOptions | None = None) -> str:
        """Return the compressed outline text for ``raw``."""

        return self.compress(raw, options).text

    def compress(self, raw: str, options: OutlineOptions | None = None) -> OutlineResult:
        """Run the full pipeline and return the outline with statistics."""

        opts = options or self.options
        with compression_context(pass_id=new_pass_id(), stage="parse"):
            structure = build_page_structure(raw)
            self.engine.clear_cache()

            for node in structure.nodes:
                node.priority = score_priority(node)

            set_stage("unwrap")
            roots = self._remove_wrappers(structure.root_nodes)

            set_stage("fold" if opts.mode == "smart" else "walk")
            detector = RunDetector(self.engine, threshold=opts.fold_threshold)
            items = self._build_items(roots, structure, detector, smart=opts.mode == "smart")

            structure.priority_queue = sorted(
                (n for n in structure.nodes if n.group_id is None),
                key=lambda n: (-n.priority, n.line_number),
            )

            set_stage("emit")
            entries: list[_Entry] = []
            for item in items:
                self._emit(item, 0, None, entries)

            set_stage("budget")
            kept, dropped = self._enforce_budget(entries, opts.max_lines)

            text = "\n".join(self._render(e, opts) for e in kept)
            result = OutlineResult(
                text=text,
                original_lines=structure.total_lines,
                output_lines=len(kept),
                groups=structure.groups,
                dropped=dropped,
                structure=structure,
            )
            logger.info(
                "Compressed %d lines to %d (%d groups folding %d nodes, %d dropped)",
                result.original_lines,
                result.output_lines,
                len(result.groups),
                result.folded_members,
                result.dropped,
            )
            return result

    # -- wrapper removal -------------------------------------------------------

    @staticmethod
    def _is_wrapper(node: ElementNode, child_count: int) -> bool:
        return (
            child_count == 1
            and not node.content.strip()
            and not node.has_pointer
            and not node.fold_refs
            and node.type in WRAPPER_TYPES
        )

    def _remove_wrappers(self, nodes: list[ElementNode]) -> list[ElementNode]:
        out: list[ElementNode] = []
        for node in nodes:
            while self._is_wrapper(node, len(node.children)):
                child = node.children[0]
                child.parent_id = node.parent_id
                node = child
            node.children = self._remove_wrappers(node.children)
            out.append(node)
        return out

    # -- folding ---------------------------------------------------------------

    def _build_items(
        self,
        nodes: list[ElementNode],
        structure: PageStructure,
        detector: RunDetector,
        *,
        smart: bool,
    ) -> list[_OutlineItem]:
        runs_by_start: dict[int, list[ElementNode]] = {}
        absorbed: set[int] = set()
        if smart and len(nodes) >= 3:
            for segment in self._segments(nodes):
                for run in detector.find_all_similar_sequences([nodes[i] for i in segment]):
                    members = [segment[k] for k in run.indices]
                    runs_by_start[members[0]] = [nodes[i] for i in members]
                    absorbed.update(members[1:])

        items: list[_OutlineItem] = []
        for i, node in enumerate(nodes):
            if i in absorbed:
                continue
            if i in runs_by_start:
                items.append(_OutlineItem(self._make_group(runs_by_start[i], structure)))
                continue
            children = self._build_items(node.children, structure, detector, smart=smart)
            if self._is_wrapper(node, len(children)):
                items.append(children[0])
            else:
                items.append(_OutlineItem(node, children))
        return items

    @staticmethod
    def _segments(nodes: list[ElementNode]) -> list[list[int]]:
        """Split sibling positions at already-folded lines, which never fold again."""

        segments: list[list[int]] = [[]]
        for i, node in enumerate(nodes):
            if node.fold_refs:
                segments.append([])
            else:
                segments[-1].append(i)
        return [s for s in segments if len(s) >= 3]

    @staticmethod
    def _make_group(members: list[ElementNode], structure: PageStructure) -> ElementGroup:
        first = members[0]
        group = ElementGroup(
            group_id=format_group_id(len(structure.groups) + 1),
            type=first.type,
            depth=first.depth,
            count=len(members),
            samples=members[:MAX_GROUP_SAMPLES],
            refs=[m.ref for m in members if m.ref],
            start_line=first.line_number,
            end_line=members[-1].line_number,
            priority=max(m.priority for m in members),
        )
        for m in members:
            m.is_repetitive = True
            m.group_id = group.group_id
        structure.groups.append(group)
        return group

    # -- serialization ---------------------------------------------------------

    def _render_line(self, node: ElementNode, level: int, opts: OutlineOptions) -> str:
        line = node.line
        if node.content_span is not None:
            shortened = truncate_text(node.content, opts.text_limit)
            if shortened != node.content:
                start, end = node.content_span
                line = line[:start] + shortened + line[end:]
        if opts.preserve_structure:
            return line
        return INDENT * level + line.strip()

    def _render_fold_line(self, group: ElementGroup, level: int, opts: OutlineOptions) -> str:
        first = group.first_element
        indent = first.indent if opts.preserve_structure else INDENT * level
        text = truncate_text(first.content, opts.text_limit).strip()
        label = f' "{text}"' if text else ""
        return (
            f"{indent}- {group.type}{label} "
            f"(... and {group.count - 1} more similar) {format_fold_refs(group.refs)}"
        )

    def _render(self, entry: _Entry, opts: OutlineOptions) -> str:
        if isinstance(entry.element, ElementGroup):
            return self._render_fold_line(entry.element, entry.level, opts)
        return self._render_line(entry.element, entry.level, opts)

    def _emit(self, item: _OutlineItem, level: int, parent: int | None, entries: list[_Entry]) -> None:
        element = item.element
        if isinstance(element, ElementGroup):
            entry = _Entry(
                element=element,
                level=level,
                priority=element.priority,
                protected=True,
                line_number=element.start_line,
                parent=parent,
            )
        else:
            entry = _Entry(
                element=element,
                level=level,
                priority=element.priority,
                protected=bool(element.fold_refs),
                line_number=element.line_number,
                parent=parent,
                wrapper=self._is_wrapper(element, 1),
            )
        entries.append(entry)
        index = len(entries) - 1
        if parent is not None:
            entries[parent].children += 1
        for child in item.children:
            self._emit(child, level + 1, index, entries)

    # -- budget ----------------------------------------------------------------

    @staticmethod
    def _drop_key(entry: _Entry, index: int) -> tuple[int, int, int, int]:
        # lowest priority first, then deepest, then latest in the document
        return (entry.priority, -entry.level, -entry.line_number, index)

    @staticmethod
    def _splice_wrapper(entries: list[_Entry], index: int, dropped: set[int]) -> None:
        """Replace a wrapper entry with its one remaining child."""

        wrapper = entries[index]
        for j in range(index + 1, len(entries)):
            if entries[j].parent == index and j not in dropped:
                entries[j].parent = wrapper.parent
                break
        dropped.add(index)

    def _enforce_budget(self, entries: list[_Entry], max_lines: int) -> tuple[list[_Entry], int]:
        if len(entries) <= max_lines:
            return entries, 0

        heap = [
            self._drop_key(e, i) for i, e in enumerate(entries) if e.children == 0 and not e.protected
        ]
        heapq.heapify(heap)

        dropped: set[int] = set()
        remaining = len(entries)
        while remaining > max_lines and heap:
            index = heapq.heappop(heap)[-1]
            dropped.add(index)
            remaining -= 1
            parent = entries[index].parent
            if parent is None:
                continue
            entries[parent].children -= 1
            if entries[parent].children == 0 and not entries[parent].protected:
                heapq.heappush(heap, self._drop_key(entries[parent], parent))
            elif entries[parent].children == 1 and entries[parent].wrapper:
                self._splice_wrapper(entries, parent, dropped)
                remaining -= 1

        # parents precede their children, so one forward pass settles spliced levels
        for i, e in enumerate(entries):
            if i not in dropped:
                e.level = 0 if e.parent is None else entries[e.parent].level + 1

        kept = [e for i, e in enumerate(entries) if i not in dropped]
        if len(kept) > max_lines:
            logger.warning(
                "Protected lines exceed the budget (%d > %d); cutting outline at %d lines",
                len(kept),
                max_lines,
                max_lines,
            )
            kept = kept[:max_lines]
        logger.debug("Budget dropped %d of %d lines", len(entries) - len(kept), len(entries))
        return kept, len(entries) - len(kept)


def generate(raw: str, options: OutlineOptions | None = None) -> str:
    """Compress ``raw`` with a fresh generator."""

    return OutlineGenerator(options).generate(raw)
