from __future__ import annotations

"""
Verification Result Data Models.

Defines the diagnostics produced by the oracles and the immutable result
objects passed from the orchestration layer to the interface layer (CLI),
together with their factory functions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from annocheck.domain.syntax_models import SourceFile, SyntaxNode

# -----------------------------------------------------------------------------
# DIAGNOSTICS
# -----------------------------------------------------------------------------

_LABEL_WIDTH = 9


@dataclass(frozen=True)
class Diagnostic:
    """
    Self-contained description of a failed directive.

    Attributes:
        message: One-line summary of what went wrong.
        file: Name of the fixture file.
        line: 1-based line of the anchor node.
        node_kind: ESTree-style kind of the anchor node.
        snippet: Exact source text of the anchor node.
        expected: Expected value as written in the directive.
        actual: Value reported by the analysis session.
        extra: Additional labelled lines (label, value) for context.
    """
    message: str
    file: str
    line: int
    node_kind: str
    snippet: str
    expected: str
    actual: str
    extra: Tuple[Tuple[str, str], ...] = ()

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line} [{self.node_kind}]"

    def render(self) -> str:
        """Format the diagnostic as a multi-line block."""
        rows: List[Tuple[str, str]] = [
            ("Expr", self.snippet),
            ("At", self.location),
            ("Want", self.expected),
            ("Got", self.actual),
        ]
        rows.extend(self.extra)
        lines = [self.message]
        for label, value in rows:
            lines.append(f"{(label + ':').ljust(_LABEL_WIDTH)}{value}")
        return "\n".join(lines)


# -----------------------------------------------------------------------------
# RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CaseResult:
    """
    Outcome of verifying a single fixture file.

    Attributes:
        name: Case file name.
        ok: True if every directive held.
        directives: Number of directives extracted from the file.
        failures: Diagnostics for every directive that did not hold.
    """
    name: str
    ok: bool
    directives: int = 0
    failures: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class GroupResult:
    """
    Outcome of a whole test group.

    Attributes:
        name: Group directory name.
        ok: True if the group ran to completion and every case passed.
        error: Fatal error that aborted the group, empty otherwise.
        cases: Per-case results in sorted case order.
    """
    name: str
    ok: bool
    error: str = ""
    cases: Tuple[CaseResult, ...] = ()

    @property
    def failed_cases(self) -> List[CaseResult]:
        return [c for c in self.cases if not c.ok]


@dataclass(frozen=True)
class SuiteResult:
    """
    Aggregated outcome of a run over several groups.

    Attributes:
        ok: True if every group passed.
        groups: Results in discovery order.
        summary: Counters for reporting.
    """
    ok: bool
    groups: Tuple[GroupResult, ...] = ()
    summary: Dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_diagnostic(
        source: SourceFile,
        node: SyntaxNode,
        message: str,
        expected: str,
        actual: str,
        extra: Sequence[Tuple[str, str]] = (),
) -> Diagnostic:
    """
    Build a diagnostic located at a node of a parsed file.

    Args:
        source: File containing the node.
        node: The directive's anchor node.
        message: Summary line.
        expected: Expected value.
        actual: Observed value.
        extra: Additional (label, value) lines.

    Returns:
        Diagnostic: Immutable, self-contained diagnostic.
    """
    return Diagnostic(
        message=message,
        file=source.name,
        line=node.line,
        node_kind=node.kind,
        snippet=source.snippet(node),
        expected=expected,
        actual=actual,
        extra=tuple(extra),
    )


def create_case_result(
        name: str,
        directives: int,
        failures: Optional[Sequence[Diagnostic]] = None,
) -> CaseResult:
    """
    Build a case result; the case passes only when no diagnostics were collected.

    Args:
        name: Case file name.
        directives: Number of directives verified.
        failures: Collected diagnostics.

    Returns:
        CaseResult: Immutable case outcome.
    """
    failures_t = tuple(failures or ())
    return CaseResult(name=name, ok=not failures_t, directives=directives, failures=failures_t)


def create_group_result(name: str, cases: Sequence[CaseResult]) -> GroupResult:
    cases_t = tuple(cases)
    return GroupResult(name=name, ok=all(c.ok for c in cases_t), cases=cases_t)


def create_group_error(
        name: str,
        error: str,
        cases: Optional[Sequence[CaseResult]] = None,
) -> GroupResult:
    """
    Build a failed group result for a fatal fixture or engine error.

    Args:
        name: Group directory name.
        error: Description of the fatal error.
        cases: Cases already completed before the abort, if any.

    Returns:
        GroupResult: Immutable failed group outcome.
    """
    return GroupResult(name=name, ok=False, error=error, cases=tuple(cases or ()))


def create_suite_result(groups: Sequence[GroupResult]) -> SuiteResult:
    """
    Aggregate group results and compute the run counters.

    Args:
        groups: Group results in execution order.

    Returns:
        SuiteResult: Immutable suite outcome with summary counters.
    """
    groups_t = tuple(groups)
    cases = [c for g in groups_t for c in g.cases]
    summary = {
        "groups": len(groups_t),
        "groups_failed": sum(1 for g in groups_t if not g.ok),
        "groups_errored": sum(1 for g in groups_t if g.error),
        "cases": len(cases),
        "cases_passed": sum(1 for c in cases if c.ok),
        "cases_failed": sum(1 for c in cases if not c.ok),
        "directives": sum(c.directives for c in cases),
    }
    return SuiteResult(ok=all(g.ok for g in groups_t), groups=groups_t, summary=summary)
