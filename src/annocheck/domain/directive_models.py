from __future__ import annotations

"""
Directive Domain Models.

Typed representation of the inline assertion comments embedded in fixture
source files.
"""

from dataclasses import dataclass
from enum import Enum

from annocheck.domain import constants as const
from annocheck.domain.syntax_models import SyntaxNode


class DirectiveKind(str, Enum):
    """The three supported assertion kinds, valued by their comment marker."""

    DEFINITION = const.DIRECTIVE_DEFINITION
    TYPE = const.DIRECTIVE_TYPE
    HAS_PROPS = const.DIRECTIVE_HAS_PROPS


@dataclass(frozen=True)
class Directive:
    """
    A single extracted assertion bound to its anchor node.

    Attributes:
        kind: Assertion kind.
        payload: Raw text between the marker colon and the comment terminator.
        anchor: The syntax node the assertion applies to.
        comment: The comment node that carried the directive.
    """
    kind: DirectiveKind
    payload: str
    anchor: SyntaxNode
    comment: SyntaxNode

    @property
    def line(self) -> int:
        return self.anchor.line
