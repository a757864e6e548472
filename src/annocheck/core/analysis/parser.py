from __future__ import annotations

"""
Syntax Arena Builder.

Parses JavaScript fixture sources with tree-sitter and flattens the concrete
syntax tree into a SourceFile arena. Only named nodes are kept; each node gets
a stable NodeRef, byte offsets, an ESTree-style kind, and parent/field links.
Analysis engines and the directive extractor share these arenas so that node
identity is comparable across the engine boundary.
"""

import logging
from typing import List, Optional

import tree_sitter_javascript
from tree_sitter import Language, Parser, Tree

from annocheck.domain.constants import NODE_KIND_MAP
from annocheck.domain.syntax_models import NodeRef, SourceFile, SyntaxNode

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())


class _NodeRecord:
    """Mutable node data collected during the cursor walk."""

    __slots__ = ("type", "start", "end", "line", "column", "parent", "field", "children")

    def __init__(self, node, parent: Optional[int], field: Optional[str]) -> None:
        self.type: str = node.type
        self.start: int = node.start_byte
        self.end: int = node.end_byte
        self.line: int = node.start_point[0] + 1
        self.column: int = node.start_point[1]
        self.parent = parent
        self.field = field
        self.children: List[int] = []


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_source(name: str, text: str) -> SourceFile:
    """
    Parse JavaScript source into an arena-backed SourceFile.

    Syntax errors do not abort parsing: tree-sitter recovers and the
    resulting file is flagged with 'has_errors'.

    Args:
        name: File name used in node references and diagnostics.
        text: Source text.

    Returns:
        SourceFile: The parsed file with its node arena in source order.
    """
    data = text.encode("utf-8")
    tree = Parser(JS_LANGUAGE).parse(data)
    records = _collect_records(tree)

    nodes = tuple(
        SyntaxNode(
            ref=NodeRef(name, i),
            type=r.type,
            kind=node_kind(r.type),
            start=r.start,
            end=r.end,
            line=r.line,
            column=r.column,
            parent=r.parent,
            field=r.field,
            children=tuple(r.children),
        )
        for i, r in enumerate(records)
    )

    has_errors = bool(tree.root_node.has_error)
    if has_errors:
        logger.warning(f"Parser recovered from syntax errors in '{name}'.")
    logger.debug(f"Parsed '{name}': {len(nodes)} nodes.")

    return SourceFile(name=name, text=text, data=data, nodes=nodes, has_errors=has_errors)


def node_kind(ts_type: str) -> str:
    """
    Map a tree-sitter node type to its ESTree-style kind.

    Unmapped types are converted to CamelCase ('if_statement' -> 'IfStatement').
    """
    mapped = NODE_KIND_MAP.get(ts_type)
    if mapped:
        return mapped
    return "".join(part.capitalize() for part in ts_type.split("_") if part)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _collect_records(tree: Tree) -> List[_NodeRecord]:
    """
    Walk the tree in pre-order with a cursor and record every named node.

    Anonymous nodes (punctuation, keywords) are skipped; any named node below
    one is attached to the nearest named ancestor.
    """
    records: List[_NodeRecord] = []
    parents: List[Optional[int]] = []
    cursor = tree.walk()

    while True:
        node = cursor.node
        parent = parents[-1] if parents else None
        effective = parent

        if node is not None and node.is_named:
            index = len(records)
            records.append(_NodeRecord(node, parent, cursor.field_name))
            if parent is not None:
                records[parent].children.append(index)
            effective = index

        if cursor.goto_first_child():
            parents.append(effective)
            continue

        while not cursor.goto_next_sibling():
            if not cursor.goto_parent():
                return records
            parents.pop()
