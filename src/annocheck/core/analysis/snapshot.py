from __future__ import annotations

"""
Definition Graph Snapshot.

Flattens the scope/property graph the engine exposes for one file into
dotted-path DefinitionEntry records, partitioned by locality. The walk is
depth-first; roots are visited in the order the engine reports them and
bindings in definition order (origin position, then name). A binding whose value was
already reached under another path (or that the engine explicitly marks) is
recorded as an alias of that path and is not descended into, so aliasing is
never confused with re-definition and cyclic object graphs terminate.
"""

import logging
from typing import Dict, Iterable, Tuple

from annocheck.core.engine.session import AnalysisSession
from annocheck.domain.definition_models import (
    DefinitionEntry,
    DefinitionSnapshot,
    GraphBinding,
)
from annocheck.domain.syntax_models import SourceFile

logger = logging.getLogger(__name__)


def build_snapshot(session: AnalysisSession, source: SourceFile) -> DefinitionSnapshot:
    """
    Walk every graph root of a file and record its definitions.

    Args:
        session: A settled analysis session.
        source: The file being inspected.

    Returns:
        DefinitionSnapshot: Fresh snapshot; never cached between calls.
    """
    snapshot = DefinitionSnapshot(file=source.name)
    seen: Dict[int, Tuple[str, object]] = {}

    for root in session.definition_graph(source):
        _walk(session, source, root.bindings, root.prefix, root.local, snapshot, seen)

    logger.debug(
        f"Snapshot of '{source.name}': {len(snapshot.locals)} local, "
        f"{len(snapshot.nonlocals)} nonlocal definitions."
    )
    return snapshot


def _walk(
        session: AnalysisSession,
        source: SourceFile,
        bindings: Iterable[GraphBinding],
        prefix: str,
        local: bool,
        snapshot: DefinitionSnapshot,
        seen: Dict[int, Tuple[str, object]],
) -> None:
    for binding in sorted(bindings, key=_definition_order):
        if binding.origin_file is not None and binding.origin_file != source.name:
            continue

        path = f"{prefix}.{binding.name}" if prefix else binding.name
        identity = id(binding.value) if binding.value is not None else None

        alias = binding.alias_hint
        if alias is None and identity is not None:
            known = seen.get(identity)
            alias = known[0] if known else None

        snapshot.record(
            DefinitionEntry(path=path, origin=binding.origin, is_local=local, alias_target=alias)
        )
        if alias is not None or identity is None:
            continue

        # Holding the value keeps its id from being reused during the walk.
        seen[identity] = (path, binding.value)
        members = session.binding_members(binding.value)
        _walk(session, source, members, path, local, snapshot, seen)


def _definition_order(binding: GraphBinding) -> Tuple[bool, int, str]:
    # Bindings without an origin go last; ties break on name.
    origin = binding.origin
    return (origin is None, origin.index if origin else 0, binding.name)
