from __future__ import annotations

"""
Unit tests for the Property Oracle.

HAS_PROPS is a subset check: listed names must exist, extra names never fail.
"""

import pytest

from annocheck.core.analysis.directives import extract_directives
from annocheck.core.analysis.query import ExpressionQuery
from annocheck.core.oracle.property_oracle import check_properties, parse_property_payload
from annocheck.domain.errors import AssertionFailure, FixtureError


def _check_all(session, name="case.js"):
    source = session.source_file(name)
    query = ExpressionQuery(session)
    for directive in extract_directives(source):
        check_properties(directive, source, query)


def test_payload_parsing() -> None:
    """TC-01: Names are trimmed and de-duplicated."""
    assert parse_property_payload(" b , a,a ") == ["a", "b"]


@pytest.mark.parametrize("payload", ["", "  ", "a,,b", "a,"])
def test_empty_names_are_fixture_errors(payload) -> None:
    """TC-07: An empty property name is an authoring error, not a pass."""
    with pytest.raises(FixtureError, match="empty property name"):
        parse_property_payload(payload)


def test_subset_passes_with_inherited_extras(settled_session) -> None:
    """TC-02: Own and inherited extras do not fail the check."""
    session = settled_session({"case.js": "var o = {a: 1, b: 2};\no/*HAS_PROPS:a,b*/;"})

    _check_all(session)


def test_inherited_names_count(settled_session) -> None:
    """TC-03: Properties from the prototype chain are reachable."""
    session = settled_session({"case.js": "var o = {a: 1};\no/*HAS_PROPS: hasOwnProperty , toString, a, a*/;"})

    _check_all(session)


def test_missing_names_are_reported_sorted(settled_session) -> None:
    """TC-04: Missing names are listed in order, together with the type."""
    session = settled_session({"case.js": "var o = {a: 1, b: 2};\no/*HAS_PROPS:zeta,a,alpha*/;"})

    with pytest.raises(AssertionFailure) as exc:
        _check_all(session)

    diagnostic = exc.value.diagnostic
    extra = dict(diagnostic.extra)
    assert extra["Missing"] == "alpha zeta"
    assert extra["Type"] == "{a, b}"
    assert "hasOwnProperty" in diagnostic.actual
    assert diagnostic.expected == "a alpha zeta"


def test_top_level_this(settled_session) -> None:
    """TC-05: 'this' at top level exposes the global names."""
    session = settled_session({"case.js": "var g = 1;\nthis/*HAS_PROPS:g*/;"})

    _check_all(session)


def test_untyped_expression_fails(settled_session) -> None:
    """TC-06: Without a type there is nothing to enumerate."""
    session = settled_session({"case.js": "var u = missing;\nu/*HAS_PROPS:a*/;"})

    with pytest.raises(AssertionFailure, match="Expr has no type"):
        _check_all(session)
