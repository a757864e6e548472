from __future__ import annotations

"""
Test Group Orchestrator.

Runs one test group against a fresh analysis session:
1. Creates the engine from the group descriptor and runner settings.
2. Registers eagerly loaded files and drains them with an initial settle.
3. Registers every case file, in sorted order.
4. Settles once more so cross-file references are resolved.
5. Verifies each case (optionally on a thread pool, read-only).
6. Marks the session done and releases the engine.

Any FixtureError (engine load, definitions, plugins, missing files, settle,
engine crashes, malformed directives) turns the group into a failed
GroupResult, as does any other unexpected error; the caller moves on to the
next group.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Mapping, Optional

from annocheck.core.analysis.query import ExpressionQuery
from annocheck.core.engine.loader import create_engine, expand_eager_files
from annocheck.core.engine.session import AnalysisSession
from annocheck.core.pipeline.verifier import verify_case
from annocheck.domain.errors import FixtureError
from annocheck.domain.group_models import TestGroup
from annocheck.domain.verification_models import (
    CaseResult,
    GroupResult,
    create_group_error,
    create_group_result,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_group(
        group: TestGroup,
        config: Mapping[str, Any],
        *,
        debug: bool = False,
) -> GroupResult:
    """
    Execute every case of a group within a single analysis session.

    Args:
        group: The discovered group.
        config: Validated runner configuration.
        debug: Forwarded to the engine factory.

    Returns:
        GroupResult: Per-case results, or a failed result carrying the fatal error.
    """
    logger.info(f"Group '{group.name}' started ({len(group.cases)} cases).")
    completed: List[CaseResult] = []
    session: Optional[AnalysisSession] = None

    try:
        engine, source_provider = create_engine(group, config, debug=debug)
        session = AnalysisSession(
            engine,
            source_provider,
            name=group.name,
            settle_timeout=config.get("settle_timeout"),
        )

        # 1) Eager files + initial drain
        eager = expand_eager_files(group.load_eagerly, config.get("vendor_dir", ""))
        session.preload(eager)
        session.settle()

        # 2) Cases + settle
        session.register_cases(sorted(group.cases))
        session.settle()

        # 3) Verification
        session.begin_verification()
        _verify_all(session, sorted(group.cases), int(config.get("workers", 1)), completed)
        session.finish()

    except FixtureError as e:
        logger.error(f"Group '{group.name}' aborted: {e}")
        return create_group_error(group.name, str(e), completed)

    except Exception as e:
        # Engine-side objects (types, values) can fail outside the session wrappers.
        logger.exception(f"Group '{group.name}' crashed: {e}")
        return create_group_error(group.name, f"Unexpected error: {e}", completed)

    finally:
        if session is not None:
            session.close()

    result = create_group_result(group.name, completed)
    logger.info(
        f"Group '{group.name}' finished: "
        f"{len(result.cases) - len(result.failed_cases)}/{len(result.cases)} cases passed."
    )
    return result


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _verify_all(
        session: AnalysisSession,
        cases: List[str],
        workers: int,
        completed: List[CaseResult],
) -> None:
    """Verify cases and append their results to `completed` in case order."""
    query = ExpressionQuery(session)

    if workers <= 1 or len(cases) <= 1:
        for name in cases:
            completed.append(verify_case(session, name, query))
        return

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="CaseVerifier") as executor:
        futures = [executor.submit(verify_case, session, name, query) for name in cases]
        try:
            for future in futures:
                completed.append(future.result())
        except Exception:
            for future in futures:
                future.cancel()
            raise
