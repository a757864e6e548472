from __future__ import annotations

"""
Type and Property Query Adapter.

Translates an anchor node's byte span into engine queries: the smallest
enclosing expression known to the engine, its inferred type (value type
first, function type as fallback), and the full set of reachable properties.
A span without an expression or without a type is a hard assertion failure.
"""

import logging
from typing import List

from annocheck.core.engine.protocol import InferredType
from annocheck.core.engine.session import AnalysisSession
from annocheck.domain.errors import AssertionFailure
from annocheck.domain.syntax_models import SourceFile, SyntaxNode
from annocheck.domain.verification_models import create_diagnostic

logger = logging.getLogger(__name__)


class ExpressionQuery:
    """Read-only query facade bound to one settled session."""

    def __init__(self, session: AnalysisSession) -> None:
        self._session = session

    def resolve_type(self, source: SourceFile, node: SyntaxNode) -> InferredType:
        """
        Resolve the inferred type of the expression at a node.

        Args:
            source: File containing the node.
            node: Anchor node whose span is queried.

        Returns:
            InferredType: The value type, or the function type if no value
                          type is available.

        Raises:
            AssertionFailure: No expression encloses the span, or the engine
                              inferred no type for it.
        """
        expression = self._session.find_expression_around(source, node.start, node.end)
        if expression is None:
            raise AssertionFailure(
                create_diagnostic(source, node, "No expression found around node", "an expression", "none")
            )

        value = self._session.expression_type(expression)
        inferred = value.get_type() if value is not None else None
        if inferred is None and value is not None:
            inferred = value.get_function_type()

        if inferred is None:
            raise AssertionFailure(
                create_diagnostic(source, node, "Expr has no type", "a type", "none")
            )
        return inferred

    def all_properties(self, inferred: InferredType) -> List[str]:
        """Enumerate every property reachable on a type, inherited ones included."""
        props = self._session.all_properties(inferred)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Type {inferred.to_string(0)} exposes {len(props)} properties.")
        return props
