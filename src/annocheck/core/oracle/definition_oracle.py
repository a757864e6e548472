from __future__ import annotations

"""
Definition Oracle.

Checks a DEF directive against the file's definition snapshot. Payload
grammar: '<path>[:<local|nonlocal>[:<aliasPath>]]'; the locality defaults
to 'nonlocal' when omitted or empty. Identity is checked on the node
itself: the entry's origin must be the annotated node, not merely a node
with the same text.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from annocheck.domain import constants as const
from annocheck.domain.definition_models import DefinitionSnapshot
from annocheck.domain.directive_models import Directive, DirectiveKind
from annocheck.domain.errors import AssertionFailure, FixtureError, LookupFailure
from annocheck.domain.syntax_models import NodeRef, SourceFile
from annocheck.domain.verification_models import create_diagnostic

FileOpener = Callable[[str], SourceFile]

_LOCALITIES = (const.LOCALITY_LOCAL, const.LOCALITY_NONLOCAL)


@dataclass(frozen=True)
class DefinitionExpectation:
    path: str
    locality: str
    alias: Optional[str] = None


def parse_definition_payload(payload: str) -> DefinitionExpectation:
    """
    Split a DEF payload into path, locality and optional alias.

    Raises:
        FixtureError: Empty path or unknown locality.
    """
    parts = payload.split(":")
    path = parts[0]
    locality = parts[1] if len(parts) > 1 and parts[1] else const.LOCALITY_NONLOCAL
    alias = parts[2] if len(parts) > 2 and parts[2] else None

    if not path:
        raise FixtureError(f"DEF directive has an empty path: '{payload}'")
    if locality not in _LOCALITIES:
        raise FixtureError(
            f"DEF directive '{payload}' has unknown locality '{locality}' "
            f"(expected one of: {', '.join(_LOCALITIES)})"
        )
    return DefinitionExpectation(path=path, locality=locality, alias=alias)


def check_definition(
        directive: Directive,
        source: SourceFile,
        snapshot: DefinitionSnapshot,
        open_file: Optional[FileOpener] = None,
) -> None:
    """
    Verify a DEF directive.

    Args:
        directive: A DEFINITION directive.
        source: File the directive was extracted from.
        snapshot: Fresh definition snapshot of the same file.
        open_file: Optional file lookup used to describe an origin in another file.

    Raises:
        LookupFailure: The path is not among the definitions of that locality.
        AssertionFailure: Origin or alias expectations do not hold.
    """
    if directive.kind is not DirectiveKind.DEFINITION:
        raise ValueError(f"Expected a {DirectiveKind.DEFINITION.value} directive, got {directive.kind.value}")

    want = parse_definition_payload(directive.payload)
    node = directive.anchor
    kind = want.locality

    entry = snapshot.lookup(kind, want.path)
    if entry is None:
        known = snapshot.known_paths(kind)
        listing = "\n  ".join(known) if known else "(none)"
        raise LookupFailure(
            create_diagnostic(
                source, node,
                f"expected {kind} path {want.path} to be emitted",
                want.path, "missing",
                extra=((f"{kind}s", "\n  " + listing),),
            )
        )

    if entry.origin is None:
        raise AssertionFailure(
            create_diagnostic(
                source, node,
                f"expected {kind} path {want.path} to have non-null originNode",
                str(node.ref), "none",
                extra=(("Full def", repr(entry)),),
            )
        )

    if entry.origin != node.ref:
        raise AssertionFailure(
            create_diagnostic(
                source, node,
                f"{kind} path {want.path} originates at a different node",
                _describe(node.ref, source, open_file),
                _describe(entry.origin, source, open_file),
            )
        )

    if want.alias:
        if entry.alias_target is None:
            raise AssertionFailure(
                create_diagnostic(
                    source, node,
                    f"expected {kind} path {want.path} to be an alias",
                    want.alias, "not an alias",
                )
            )
        if entry.alias_target != want.alias:
            raise AssertionFailure(
                create_diagnostic(
                    source, node,
                    f"expected {kind} path {want.path} to alias {want.alias}, "
                    f"but it aliases {entry.alias_target}",
                    want.alias, entry.alias_target,
                )
            )
    elif entry.alias_target is not None:
        raise AssertionFailure(
            create_diagnostic(
                source, node,
                f"expected {kind} path {want.path} to not be an alias, "
                f"but it aliases {entry.alias_target}",
                "not an alias", entry.alias_target,
            )
        )


def _describe(ref: NodeRef, source: SourceFile, open_file: Optional[FileOpener]) -> str:
    owner: Optional[SourceFile] = source if ref.file == source.name else None
    if owner is None and open_file is not None:
        try:
            owner = open_file(ref.file)
        except LookupError:
            owner = None
    node = owner.resolve(ref) if owner is not None else None
    if owner is None or node is None:
        return str(ref)
    return f"{ref.file}:{node.line} [{node.kind}] '{owner.snippet(node)}'"
