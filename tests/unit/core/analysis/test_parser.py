from __future__ import annotations

"""
Unit tests for the Syntax Arena builder.

Verifies kind mapping, node identity, offsets, parent/field links and the
behaviour on recoverable syntax errors.
"""

import logging

from annocheck.core.analysis.parser import node_kind, parse_source
from annocheck.domain.syntax_models import NodeRef


def _nodes_with_text(source, text):
    return [n for n in source.iter_nodes() if source.snippet(n) == text]


def test_parse_declaration_kinds() -> None:
    """TC-01: Identifiers and literals receive ESTree-style kinds."""
    source = parse_source("a.js", "var x = 1;")

    assert source.root.kind == "Program"
    ident = [n for n in _nodes_with_text(source, "x") if n.type == "identifier"][0]
    literal = [n for n in _nodes_with_text(source, "1") if n.type == "number"][0]

    assert ident.kind == "Identifier"
    assert literal.kind == "Literal"
    assert ident.line == 1
    assert ident.column == 4
    assert not source.has_errors


def test_refs_follow_source_order() -> None:
    """TC-02: Arena indices are pre-order and refs name the file."""
    source = parse_source("order.js", "var a = 1;\nvar b = 2;\n")

    for i, node in enumerate(source.nodes):
        assert node.ref == NodeRef("order.js", i)
        assert node.index == i

    starts = [n.start for n in source.nodes]
    assert starts == sorted(starts)

    a = [n for n in _nodes_with_text(source, "a") if n.kind == "Identifier"][0]
    b = [n for n in _nodes_with_text(source, "b") if n.kind == "Identifier"][0]
    assert a.index < b.index
    assert b.line == 2


def test_parent_and_field_links() -> None:
    """TC-03: Children point back to their parent and carry grammar fields."""
    source = parse_source("f.js", "var x = 1;")

    for node in source.nodes:
        for child in source.children_of(node):
            assert child.parent == node.index
            assert source.parent_of(child) == node

    declarator = [n for n in source.nodes if n.type == "variable_declarator"][0]
    assert source.snippet(source.child_by_field(declarator, "name")) == "x"
    assert source.snippet(source.child_by_field(declarator, "value")) == "1"
    assert source.child_by_field(declarator, "missing") is None


def test_offsets_are_bytes() -> None:
    """TC-04: Offsets index the UTF-8 buffer, so snippets survive multi-byte text."""
    text = 'var s = "héllo"; s;'
    source = parse_source("u.js", text)

    last = [n for n in source.nodes if n.type == "identifier"][-1]
    assert source.snippet(last) == "s"
    assert last.end == len(text.encode("utf-8")) - 1
    assert source.data[last.start:last.end] == b"s"


def test_comments_are_nodes() -> None:
    """TC-05: Block comments are kept as Comment nodes."""
    source = parse_source("c.js", "x /*TYPE:number*/;")

    comments = source.comments()
    assert len(comments) == 1
    assert source.snippet(comments[0]) == "/*TYPE:number*/"


def test_syntax_errors_are_recovered(caplog) -> None:
    """TC-06: A broken file is still returned, flagged and logged."""
    with caplog.at_level(logging.WARNING):
        source = parse_source("broken.js", "var = ;")

    assert source.has_errors
    assert len(source.nodes) >= 1
    assert "broken.js" in caplog.text


def test_node_kind_mapping() -> None:
    """TC-07: Mapped types use the table, others are converted to CamelCase."""
    assert node_kind("this") == "ThisExpression"
    assert node_kind("property_identifier") == "Identifier"
    assert node_kind("template_string") == "Literal"
    assert node_kind("if_statement") == "IfStatement"
    assert node_kind("for_in_statement") == "ForInStatement"


def test_find_node_around_prefers_smallest() -> None:
    """TC-08: The smallest enclosing node satisfying the predicate wins."""
    source = parse_source("m.js", "o.a.b;")
    inner = [n for n in source.nodes if n.type == "property_identifier" and source.snippet(n) == "a"][0]

    member = source.find_node_around(inner.start, inner.end, lambda n: n.kind == "MemberExpression")
    assert source.snippet(member) == "o.a"

    any_node = source.find_node_around(inner.start, inner.end, lambda n: True)
    assert any_node == inner


def test_resolve_rejects_foreign_refs() -> None:
    """TC-09: Refs from another file or out of range resolve to None."""
    source = parse_source("r.js", "x;")

    assert source.resolve(NodeRef("r.js", 0)) == source.root
    assert source.resolve(NodeRef("other.js", 0)) is None
    assert source.resolve(NodeRef("r.js", 999)) is None
