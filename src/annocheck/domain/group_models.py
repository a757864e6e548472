from __future__ import annotations

"""
Test Group Domain Models.

A test group is a directory of fixture files that share one analysis session,
described by a 'test.json' descriptor.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class TestGroup:
    """
    A discovered test group.

    Attributes:
        name: Directory name of the group.
        path: Absolute path of the group directory.
        cases: Case file names, sorted.
        defs: Definition file names to load into the engine.
        plugins: Plugin name to enablement flag or options.
        load_eagerly: Files registered before the initial settle.
        engine: Optional per-group engine factory path ('module:attr').
    """
    __test__ = False  # not a pytest test class

    name: str
    path: str
    cases: Tuple[str, ...] = ()
    defs: Tuple[str, ...] = ()
    plugins: Dict[str, Any] = field(default_factory=dict)
    load_eagerly: Tuple[str, ...] = ()
    engine: Optional[str] = None
