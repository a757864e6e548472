from __future__ import annotations

"""
Analysis Engine Contract.

annocheck never performs analysis itself; it drives an external engine
through the protocol below. Engines are produced by a factory taking
EngineOptions and are loaded by import path (see loader.py).

Engines are expected to parse files with annocheck.core.analysis.parser so
that the NodeRefs they report match the nodes the directive extractor sees.
"""

from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from annocheck.domain.definition_models import GraphBinding, GraphRoot
from annocheck.domain.syntax_models import SourceFile

SourceProvider = Callable[[str], str]
SettleCallback = Callable[[Optional[BaseException]], None]


@runtime_checkable
class InferredType(Protocol):
    """A type as reported by the engine."""

    def to_string(self, verbosity: int) -> str: ...


@runtime_checkable
class InferredValue(Protocol):
    """The abstract value of an expression; may hold a value or function type."""

    def get_type(self) -> Optional[InferredType]: ...

    def get_function_type(self) -> Optional[InferredType]: ...


@runtime_checkable
class AnalysisEngine(Protocol):
    """Operations annocheck consumes from a static-analysis engine."""

    def register_file(self, name: str, source_provider: SourceProvider) -> None:
        """Schedule a file for analysis."""
        ...

    def settle(self, callback: SettleCallback) -> None:
        """Resolve all pending work, then invoke callback(error_or_None)."""
        ...

    def get_file(self, name: str) -> SourceFile:
        """Return the parsed representation of a registered file."""
        ...

    def find_expression_around(self, source: SourceFile, start: int, end: int) -> Optional[Any]:
        """Return a handle to the smallest known expression enclosing the span."""
        ...

    def expression_type(self, expression: Any) -> Optional[InferredValue]: ...

    def all_properties(self, inferred: InferredType) -> Iterable[str]:
        """Enumerate every reachable property, including inherited ones."""
        ...

    def definition_graph(self, source: SourceFile) -> Iterable[GraphRoot]: ...

    def binding_members(self, value: object) -> Iterable[GraphBinding]: ...


@dataclass(frozen=True)
class EngineOptions:
    """
    Construction parameters handed to an engine factory.

    Attributes:
        project_dir: Group directory; relative file names resolve against it.
        source_provider: Reads a registered file name into text.
        defs: Parsed definition files, in declaration order.
        plugins: Enabled plugin name to its options value.
        plugin_modules: Loaded plugin modules keyed by plugin name.
        debug: True when verbose engine diagnostics are requested.
    """
    project_dir: str
    source_provider: SourceProvider
    defs: List[Dict[str, Any]] = field(default_factory=list)
    plugins: Dict[str, Any] = field(default_factory=dict)
    plugin_modules: Dict[str, ModuleType] = field(default_factory=dict)
    debug: bool = False


EngineFactory = Callable[[EngineOptions], AnalysisEngine]
