from __future__ import annotations

"""
Directive Extraction Service.

Scans a parsed fixture for block comments of the form '/*KIND:payload*/'
and binds each one to the eligible syntax node that immediately precedes it.
Whitespace and other directive comments between the node and the comment are
skipped, which lets several directives stack on the same node:

    var x/*DEF:x:local*//*TYPE:number*/ = 1;
"""

import logging
import re
from typing import Callable, Dict, List, Mapping, Optional

from annocheck.domain import constants as const
from annocheck.domain.directive_models import Directive, DirectiveKind
from annocheck.domain.errors import FixtureError
from annocheck.domain.syntax_models import SourceFile, SyntaxNode

logger = logging.getLogger(__name__)

NodeFilter = Callable[[SyntaxNode], bool]

_MARKER_RX = re.compile(r"^/\*([A-Z][A-Z0-9_]*):(.*)\*/$", re.DOTALL)
_WHITESPACE = b" \t\r\n\f\v"


def _kind_filter(kinds) -> NodeFilter:
    return lambda node: node.kind in kinds


DEFAULT_FILTERS: Dict[DirectiveKind, NodeFilter] = {
    DirectiveKind.DEFINITION: _kind_filter(const.DEFINITION_ANCHOR_KINDS),
    DirectiveKind.TYPE: _kind_filter(const.EXPRESSION_ANCHOR_KINDS),
    DirectiveKind.HAS_PROPS: _kind_filter(const.EXPRESSION_ANCHOR_KINDS),
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def extract_directives(
        source: SourceFile,
        filters: Optional[Mapping[DirectiveKind, NodeFilter]] = None,
) -> List[Directive]:
    """
    Extract every directive in a file, in source order.

    Args:
        source: The parsed fixture file.
        filters: Per-kind predicates selecting eligible anchor nodes.
                 Defaults to DEFAULT_FILTERS.

    Returns:
        List[Directive]: Directives ordered by comment position.

    Raises:
        FixtureError: On an unknown directive kind, a DEF directive without a
                      path, a HAS_PROPS directive without names, or a directive that has no eligible node
                      immediately before it.
    """
    active = DEFAULT_FILTERS if filters is None else filters
    markers = [(c, m) for c in source.comments() if (m := _MARKER_RX.match(source.snippet(c)))]
    marker_by_end = {c.end: c for c, _ in markers}

    directives: List[Directive] = []
    for comment, match in markers:
        raw_kind, payload = match.group(1), match.group(2)
        kind = _parse_kind(raw_kind, source, comment)
        if kind is DirectiveKind.DEFINITION and not payload.split(":", 1)[0]:
            raise FixtureError(f"DEF directive with an empty path at {source.name}:{comment.line}")
        if kind is DirectiveKind.HAS_PROPS and not payload.strip():
            raise FixtureError(f"HAS_PROPS directive without property names at {source.name}:{comment.line}")

        predicate = active.get(kind)
        if predicate is None:
            raise FixtureError(
                f"No node filter registered for directive '{raw_kind}' "
                f"at {source.name}:{comment.line}"
            )

        offset = _anchor_offset(source, comment, marker_by_end)
        anchor = _find_anchor(source, offset, predicate)
        if anchor is None:
            raise FixtureError(
                f"Directive '{source.snippet(comment)}' at {source.name}:{comment.line} "
                f"does not follow an eligible node"
            )

        directives.append(Directive(kind=kind, payload=payload, anchor=anchor, comment=comment))

    logger.debug(f"Extracted {len(directives)} directives from '{source.name}'.")
    return directives


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _parse_kind(raw_kind: str, source: SourceFile, comment: SyntaxNode) -> DirectiveKind:
    try:
        return DirectiveKind(raw_kind)
    except ValueError:
        known = ", ".join(k.value for k in DirectiveKind)
        raise FixtureError(
            f"Unknown directive '{raw_kind}' at {source.name}:{comment.line} (known: {known})"
        ) from None


def _anchor_offset(
        source: SourceFile,
        comment: SyntaxNode,
        marker_by_end: Mapping[int, SyntaxNode],
) -> int:
    """Walk back from a comment over whitespace and stacked directive comments."""
    pos = comment.start
    while True:
        while pos > 0 and source.data[pos - 1] in _WHITESPACE:
            pos -= 1
        previous = marker_by_end.get(pos)
        if previous is None or previous is comment:
            return pos
        pos = previous.start


def _find_anchor(source: SourceFile, offset: int, predicate: NodeFilter) -> Optional[SyntaxNode]:
    """Return the innermost eligible node ending exactly at the offset."""
    best: Optional[SyntaxNode] = None
    for node in source.iter_nodes():
        if node.end != offset or node.kind == "Comment" or not predicate(node):
            continue
        if best is None or (node.end - node.start) <= (best.end - best.start):
            best = node
    return best
