from __future__ import annotations

"""
Unit tests for the Definition Oracle.

Runs DEF directives against snapshots produced from the scripted engine and
checks every failure branch, in order: missing path, missing origin, origin
identity, and the three alias expectations.
"""

import pytest

from annocheck.core.analysis.directives import extract_directives
from annocheck.core.analysis.snapshot import build_snapshot
from annocheck.core.oracle.definition_oracle import check_definition, parse_definition_payload
from annocheck.domain.definition_models import DefinitionEntry, DefinitionSnapshot
from annocheck.domain.errors import AssertionFailure, FixtureError, LookupFailure


def _check_all(session, name="case.js"):
    source = session.source_file(name)
    snapshot = build_snapshot(session, source)
    for directive in extract_directives(source):
        check_definition(directive, source, snapshot, open_file=session.source_file)


# -----------------------------------------------------------------------------
# Payload grammar
# -----------------------------------------------------------------------------

def test_payload_defaults_to_nonlocal() -> None:
    """TC-01: Locality defaults to nonlocal when omitted or empty."""
    assert parse_definition_payload("foo").locality == "nonlocal"
    assert parse_definition_payload("foo:").locality == "nonlocal"
    assert parse_definition_payload("foo::bar").alias == "bar"


def test_payload_full_form() -> None:
    """TC-02: Path, locality and alias are split on ':'."""
    want = parse_definition_payload("a.b:local:c.d")

    assert (want.path, want.locality, want.alias) == ("a.b", "local", "c.d")


def test_payload_unknown_locality_is_fatal() -> None:
    """TC-03: Only 'local' and 'nonlocal' are accepted."""
    with pytest.raises(FixtureError, match="unknown locality 'global'"):
        parse_definition_payload("foo:global")


# -----------------------------------------------------------------------------
# Comparator
# -----------------------------------------------------------------------------

def test_exported_name_passes(settled_session) -> None:
    """TC-04: 'exports.foo = 1' satisfies DEF:foo as a non-alias nonlocal."""
    session = settled_session({"case.js": "exports.foo/*DEF:foo*/ = 1;"})

    _check_all(session)


def test_local_declaration_passes(settled_session) -> None:
    """TC-05: A var declaration is a local definition originating at its name."""
    session = settled_session({"case.js": "var x/*DEF:x:local*/ = 1;\nvar o = {k/*DEF:o.k:local*/: 2};"})

    _check_all(session)


def test_wrong_locality_lists_known_paths(settled_session) -> None:
    """TC-06: Looking up a local name in the nonlocal set is a LookupFailure."""
    session = settled_session({"case.js": "exports.other = 2;\nvar x/*DEF:x*/ = 1;"})

    with pytest.raises(LookupFailure) as exc:
        _check_all(session)

    diagnostic = exc.value.diagnostic
    assert diagnostic.message == "expected nonlocal path x to be emitted"
    assert "other" in dict(diagnostic.extra)["nonlocals"]
    assert diagnostic.actual == "missing"


def test_origin_must_be_the_anchor(settled_session) -> None:
    """TC-07: A reference with the same text is not the defining node."""
    session = settled_session({"case.js": "var x = 1;\nx/*DEF:x:local*/;"})

    with pytest.raises(AssertionFailure) as exc:
        _check_all(session)

    diagnostic = exc.value.diagnostic
    assert "originates at a different node" in diagnostic.message
    assert diagnostic.expected == "case.js:2 [Identifier] 'x'"
    assert diagnostic.actual == "case.js:1 [Identifier] 'x'"


def test_expected_alias_missing(settled_session) -> None:
    """TC-08: An alias was expected but the engine recorded none."""
    session = settled_session({"case.js": "exports.foo/*DEF:foo:nonlocal:other.path*/ = 1;"})

    with pytest.raises(AssertionFailure) as exc:
        _check_all(session)

    assert exc.value.diagnostic.message == "expected nonlocal path foo to be an alias"
    assert exc.value.diagnostic.expected == "other.path"


def test_alias_passes(settled_session) -> None:
    """TC-09: Re-exporting a local object is an alias of the local path."""
    session = settled_session({"case.js": "var foo = {};\nexports.bar/*DEF:bar:nonlocal:foo*/ = foo;"})

    _check_all(session)


def test_alias_of_different_path(settled_session) -> None:
    """TC-10: The recorded alias target must match the expected one."""
    session = settled_session({"case.js": "var foo = {};\nexports.bar/*DEF:bar::baz*/ = foo;"})

    with pytest.raises(AssertionFailure) as exc:
        _check_all(session)

    diagnostic = exc.value.diagnostic
    assert diagnostic.message == "expected nonlocal path bar to alias baz, but it aliases foo"
    assert (diagnostic.expected, diagnostic.actual) == ("baz", "foo")


def test_unexpected_alias(settled_session) -> None:
    """TC-11: An alias that was not declared in the directive fails."""
    session = settled_session({"case.js": "var foo = {};\nexports.bar/*DEF:bar*/ = foo;"})

    with pytest.raises(AssertionFailure) as exc:
        _check_all(session)

    assert exc.value.diagnostic.message == "expected nonlocal path bar to not be an alias, but it aliases foo"


def test_self_reference_alias(settled_session) -> None:
    """TC-12: Cyclic members alias their owner."""
    session = settled_session({"case.js": "var a = {};\na.self/*DEF:a.self:local:a*/ = a;"})

    _check_all(session)


def test_other_files_definitions_are_filtered(settled_session) -> None:
    """TC-13: A name exported by another file is not visible in this file's snapshot."""
    session = settled_session({
        "a.js": "exports.shared = 1;",
        "b.js": "exports.mine/*DEF:shared*/ = 2;",
    })

    with pytest.raises(LookupFailure) as exc:
        _check_all(session, "b.js")

    listing = dict(exc.value.diagnostic.extra)["nonlocals"]
    assert "mine" in listing
    assert "shared" not in listing


def test_missing_origin(parse) -> None:
    """TC-14: An entry without an origin node fails before identity is checked."""
    source = parse("exports.ghost/*DEF:ghost*/ = 1;")
    [directive] = extract_directives(source)
    snapshot = DefinitionSnapshot(file="case.js")
    snapshot.record(DefinitionEntry(path="ghost", origin=None, is_local=False))

    with pytest.raises(AssertionFailure) as exc:
        check_definition(directive, source, snapshot)

    assert exc.value.diagnostic.message == "expected nonlocal path ghost to have non-null originNode"


def test_rejects_other_directive_kinds(parse) -> None:
    """TC-15: Only DEF directives are accepted."""
    source = parse("var x = 1;\nx/*TYPE:number*/;")
    [directive] = extract_directives(source)

    with pytest.raises(ValueError):
        check_definition(directive, source, DefinitionSnapshot(file="case.js"))
