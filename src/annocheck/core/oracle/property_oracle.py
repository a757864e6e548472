from __future__ import annotations

"""
Property Oracle.

Subset check for HAS_PROPS directives: every listed property must be
reachable on the inferred type. Additional properties (own or inherited)
never fail the check.
"""

from typing import List

from annocheck.core.analysis.query import ExpressionQuery
from annocheck.domain.directive_models import Directive, DirectiveKind
from annocheck.domain.errors import AssertionFailure, FixtureError
from annocheck.domain.syntax_models import SourceFile
from annocheck.domain.verification_models import create_diagnostic


def parse_property_payload(payload: str) -> List[str]:
    """
    Split a comma-separated list into sorted, unique, trimmed names.

    Raises:
        FixtureError: The list is empty or contains an empty name.
    """
    names = [name.strip() for name in payload.split(",")]
    if not all(names):
        raise FixtureError(f"HAS_PROPS directive has an empty property name: '{payload}'")
    return sorted(set(names))


def check_properties(directive: Directive, source: SourceFile, query: ExpressionQuery) -> None:
    """
    Verify a HAS_PROPS directive.

    Args:
        directive: A HAS_PROPS directive.
        source: File the directive was extracted from.
        query: Query adapter bound to the settled session.

    Raises:
        AssertionFailure: No type could be inferred, or a listed property is missing.
    """
    if directive.kind is not DirectiveKind.HAS_PROPS:
        raise ValueError(f"Expected a {DirectiveKind.HAS_PROPS.value} directive, got {directive.kind.value}")

    want = parse_property_payload(directive.payload)
    inferred = query.resolve_type(source, directive.anchor)
    available = set(query.all_properties(inferred))

    missing = [name for name in want if name not in available]
    if missing:
        raise AssertionFailure(
            create_diagnostic(
                source, directive.anchor,
                "Expr is missing properties",
                " ".join(want), " ".join(sorted(available)),
                extra=(
                    ("Missing", " ".join(missing)),
                    ("Type", inferred.to_string(0)),
                ),
            )
        )
