from __future__ import annotations

"""
Syntax Arena Data Models.

Defines the parsed representation of a fixture file shared by the directive
extractor and the analysis engine. Every node lives in a per-file arena and
is identified by a stable NodeRef (file name + pre-order index), so node
identity survives any number of traversals or re-wrappings.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

# -----------------------------------------------------------------------------
# NODE IDENTITY
# -----------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class NodeRef:
    """
    Stable handle to a node within a file's arena.

    Attributes:
        file: Name of the file the node was parsed from.
        index: Pre-order position of the node inside the arena.
    """
    file: str
    index: int

    def __str__(self) -> str:
        return f"{self.file}#{self.index}"


@dataclass(frozen=True)
class SyntaxNode:
    """
    A named syntax node with byte offsets.

    Attributes:
        ref: Stable identity of the node.
        type: Raw parser node type (e.g. 'property_identifier').
        kind: ESTree-style kind (e.g. 'Identifier').
        start: Inclusive start byte offset.
        end: Exclusive end byte offset.
        line: 1-based line of the first byte.
        column: 0-based byte column of the first byte.
        parent: Arena index of the parent node, if any.
        field: Grammar field this node occupies in its parent, if any.
        children: Arena indices of the named children, in source order.
    """
    ref: NodeRef
    type: str
    kind: str
    start: int
    end: int
    line: int
    column: int
    parent: Optional[int] = None
    field: Optional[str] = None
    children: Tuple[int, ...] = ()

    @property
    def index(self) -> int:
        return self.ref.index


# -----------------------------------------------------------------------------
# SOURCE FILE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFile:
    """
    A parsed fixture file.

    Attributes:
        name: File name as registered with the analysis session.
        text: Decoded source text.
        data: UTF-8 encoded source; all offsets index into this buffer.
        nodes: Arena of named nodes in pre-order (source order).
        has_errors: True if the parser recovered from syntax errors.
    """
    name: str
    text: str
    data: bytes
    nodes: Tuple[SyntaxNode, ...] = field(default_factory=tuple)
    has_errors: bool = False

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    def node(self, index: int) -> SyntaxNode:
        return self.nodes[index]

    def resolve(self, ref: NodeRef) -> Optional[SyntaxNode]:
        """Return the node behind a ref, or None if it belongs elsewhere."""
        if ref.file != self.name or not 0 <= ref.index < len(self.nodes):
            return None
        return self.nodes[ref.index]

    def iter_nodes(self) -> Iterator[SyntaxNode]:
        return iter(self.nodes)

    def children_of(self, node: SyntaxNode) -> List[SyntaxNode]:
        return [self.nodes[i] for i in node.children]

    def child_by_field(self, node: SyntaxNode, field_name: str) -> Optional[SyntaxNode]:
        for i in node.children:
            if self.nodes[i].field == field_name:
                return self.nodes[i]
        return None

    def parent_of(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def comments(self) -> List[SyntaxNode]:
        return [n for n in self.nodes if n.kind == "Comment"]

    def snippet(self, node: SyntaxNode) -> str:
        """Return the exact source text covered by the node."""
        return self.slice(node.start, node.end)

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8", errors="replace")

    def find_node_around(
            self,
            start: int,
            end: int,
            predicate: Callable[[SyntaxNode], bool],
    ) -> Optional[SyntaxNode]:
        """
        Locate the smallest node enclosing [start, end) that satisfies a predicate.

        Ties on span length resolve to the innermost node (latest in pre-order).

        Args:
            start: Inclusive start byte offset.
            end: Exclusive end byte offset.
            predicate: Filter applied to candidate nodes.

        Returns:
            Optional[SyntaxNode]: The matching node, or None.
        """
        best: Optional[SyntaxNode] = None
        for node in self.nodes:
            if node.start > start or node.end < end:
                continue
            if not predicate(node):
                continue
            if best is None or (node.end - node.start) <= (best.end - best.start):
                best = node
        return best
