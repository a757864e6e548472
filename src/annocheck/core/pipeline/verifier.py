from __future__ import annotations

"""
Per-Case Verification Pipeline.

Extracts the directives of one case file and routes each one to its oracle:
1. DEF directives are checked against a definition snapshot of the file,
   built once per case and only when the file carries DEF directives.
2. TYPE and HAS_PROPS directives are checked through the query adapter.

Assertion failures are collected so every directive of the case is reported.
Fixture errors are not caught here; they abort the whole group.
"""

import logging
from typing import Callable, Dict, List, Optional

from annocheck.core.analysis.directives import extract_directives
from annocheck.core.analysis.query import ExpressionQuery
from annocheck.core.analysis.snapshot import build_snapshot
from annocheck.core.engine.session import AnalysisSession
from annocheck.core.oracle.definition_oracle import check_definition
from annocheck.core.oracle.property_oracle import check_properties
from annocheck.core.oracle.type_oracle import check_type
from annocheck.domain.definition_models import DefinitionSnapshot
from annocheck.domain.directive_models import Directive, DirectiveKind
from annocheck.domain.errors import AssertionFailure
from annocheck.domain.syntax_models import SourceFile
from annocheck.domain.verification_models import (
    CaseResult,
    Diagnostic,
    create_case_result,
)

logger = logging.getLogger(__name__)

_QueryCheck = Callable[[Directive, SourceFile, ExpressionQuery], None]

_QUERY_ORACLES: Dict[DirectiveKind, _QueryCheck] = {
    DirectiveKind.TYPE: check_type,
    DirectiveKind.HAS_PROPS: check_properties,
}


def verify_case(
        session: AnalysisSession,
        name: str,
        query: Optional[ExpressionQuery] = None,
) -> CaseResult:
    """
    Verify every directive of a single case file.

    Args:
        session: A settled session in which the case was registered.
        name: Case file name as registered.
        query: Shared query adapter; one is created when omitted.

    Returns:
        CaseResult: Outcome carrying one diagnostic per failed directive.

    Raises:
        FixtureError: The file holds a malformed directive.
    """
    query = query or ExpressionQuery(session)
    source = session.source_file(name)
    directives = extract_directives(source)

    snapshot: Optional[DefinitionSnapshot] = None
    failures: List[Diagnostic] = []

    for directive in directives:
        try:
            if directive.kind is DirectiveKind.DEFINITION:
                if snapshot is None:
                    snapshot = build_snapshot(session, source)
                check_definition(directive, source, snapshot, open_file=session.source_file)
            else:
                _QUERY_ORACLES[directive.kind](directive, source, query)
        except AssertionFailure as e:
            failures.append(e.diagnostic)
            logger.debug(f"{e.diagnostic.location} {directive.kind.value} failed: {e.diagnostic.message}")

    result = create_case_result(name, len(directives), failures)
    if result.ok:
        logger.info(f"PASS {name} ({len(directives)} directives)")
    else:
        logger.warning(f"FAIL {name} ({len(failures)}/{len(directives)} directives failed)")
    return result
