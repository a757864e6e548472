from __future__ import annotations

"""
Type Oracle.

Exact-match check for TYPE directives: the inferred type, stringified at the
fixed verbosity, must equal the payload byte for byte. No whitespace or
formatting normalization is applied.
"""

from annocheck.core.analysis.query import ExpressionQuery
from annocheck.domain.constants import TYPE_VERBOSITY
from annocheck.domain.directive_models import Directive, DirectiveKind
from annocheck.domain.errors import AssertionFailure
from annocheck.domain.syntax_models import SourceFile
from annocheck.domain.verification_models import create_diagnostic


def check_type(directive: Directive, source: SourceFile, query: ExpressionQuery) -> None:
    """
    Verify a TYPE directive.

    Args:
        directive: A TYPE directive.
        source: File the directive was extracted from.
        query: Query adapter bound to the settled session.

    Raises:
        AssertionFailure: No type could be inferred, or the type string differs.
    """
    if directive.kind is not DirectiveKind.TYPE:
        raise ValueError(f"Expected a {DirectiveKind.TYPE.value} directive, got {directive.kind.value}")

    want = directive.payload
    inferred = query.resolve_type(source, directive.anchor)
    got = inferred.to_string(TYPE_VERBOSITY)

    if got != want:
        raise AssertionFailure(
            create_diagnostic(
                source, directive.anchor,
                "Expr type does not match expectation",
                want, got,
            )
        )
