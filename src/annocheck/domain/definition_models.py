from __future__ import annotations

"""
Definition Graph Data Models.

Two layers live here:
1. GraphRoot / GraphBinding: the engine-facing view of the scope and property
   graph, produced by an AnalysisEngine on demand.
2. DefinitionEntry / DefinitionSnapshot: the flattened, path-keyed result of
   walking that graph for one file.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from annocheck.domain import constants as const
from annocheck.domain.syntax_models import NodeRef

# -----------------------------------------------------------------------------
# ENGINE-FACING GRAPH VIEW
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphBinding:
    """
    One named binding in a scope or on an object.

    Attributes:
        name: Property or variable name.
        origin: Node that introduced the binding, if the engine knows it.
        origin_file: File the binding was declared in, if known.
        value: Opaque engine object for the bound value. Compared by identity
               to detect aliases, and passed back to the engine to enumerate
               members. None for primitive or unknown values.
        alias_hint: Path the engine explicitly marks this binding as pointing at.
    """
    name: str
    origin: Optional[NodeRef] = None
    origin_file: Optional[str] = None
    value: Optional[object] = field(default=None, compare=False)
    alias_hint: Optional[str] = None


@dataclass(frozen=True)
class GraphRoot:
    """
    A scope from which the definition walk starts.

    Attributes:
        local: True if the scope belongs to the file's own scope chain.
        bindings: Top-level bindings of the scope.
        prefix: Dotted prefix prepended to every path under this root.
    """
    local: bool
    bindings: Tuple[GraphBinding, ...] = ()
    prefix: str = ""


# -----------------------------------------------------------------------------
# FLATTENED SNAPSHOT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DefinitionEntry:
    """
    A resolved binding keyed by its dotted path.

    Attributes:
        path: Dotted path from the walk root.
        origin: Originating node, or None when the engine recorded none.
        is_local: Locality of the binding.
        alias_target: Path this entry points at, if it is an alias.
    """
    path: str
    origin: Optional[NodeRef]
    is_local: bool
    alias_target: Optional[str] = None

    @property
    def is_alias(self) -> bool:
        return self.alias_target is not None


@dataclass
class DefinitionSnapshot:
    """
    Path-keyed definitions of one file, partitioned by locality.

    Attributes:
        file: Name of the inspected file.
        locals: Entries declared in the file's own scope chain.
        nonlocals: Entries visible from outside the file.
    """
    file: str
    locals: Dict[str, DefinitionEntry] = field(default_factory=dict)
    nonlocals: Dict[str, DefinitionEntry] = field(default_factory=dict)

    def record(self, entry: DefinitionEntry) -> None:
        target = self.locals if entry.is_local else self.nonlocals
        target[entry.path] = entry

    def entries(self, locality: str) -> Dict[str, DefinitionEntry]:
        if locality == const.LOCALITY_LOCAL:
            return self.locals
        if locality == const.LOCALITY_NONLOCAL:
            return self.nonlocals
        raise ValueError(f"Unknown locality '{locality}'.")

    def lookup(self, locality: str, path: str) -> Optional[DefinitionEntry]:
        return self.entries(locality).get(path)

    def alias_of(self, locality: str, path: str) -> Optional[str]:
        entry = self.lookup(locality, path)
        return entry.alias_target if entry else None

    def known_paths(self, locality: str) -> List[str]:
        return sorted(self.entries(locality))
